# forecasting/__init__.py
"""
Forecasting app - Cash-flow forecasts and what-if analysis for FinBot.

- statistics.py: Monte Carlo, trend and growth-scenario math (numpy)
- scenario.py: projects monthly cash from the company's own figures
- simulation.py: macro (fx / interest / inflation) stress simulation
"""
