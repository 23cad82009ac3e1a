# audit/__init__.py
"""
Audit app - Append-only audit trail for FinBot.

Every security-relevant or money-moving mutation records an AuditLog row
with before/after snapshots, a field-level diff, and request origin.
"""
