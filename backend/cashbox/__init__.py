# cashbox/__init__.py
"""
Cashbox app - Physical cash ledgers for FinBot.

A cashbox is a cash balance kept apart from bank accounts. Deposits,
withdrawals and cashbox-to-cashbox transfers move its balance, which can
never go negative, and every mutation writes an audit entry.
"""
