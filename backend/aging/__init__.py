# aging/__init__.py
"""
Aging app - Accounts receivable and payable aging for FinBot.

Open invoices are bucketed by days past due. Summaries, per-customer
roll-ups, DSO/DPO and collection priorities are computed by the pure
functions in aging/analysis.py.
"""
