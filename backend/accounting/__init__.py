# accounting/__init__.py
"""
Accounting app - Bank accounts and transactions for FinBot.

This app provides:
- Account: Bank, card, loan and investment accounts with balances
- Transaction: Income, expense and transfer (virman) movements
- RecurringTransaction: Schedules that spawn transactions

Commands handle all mutations so that balances and the audit trail stay
consistent.
"""
