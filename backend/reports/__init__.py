# reports/__init__.py
"""
Reports app - File exports for FinBot.

Column-definition driven exports of accounts, transactions, cashbox
ledgers and AR/AP items to Excel, CSV, text and PDF, with Turkish and
English headers and number/date formatting.
"""
