# audit/emitter.py
"""
Audit emitter.

Commands call ``record_audit`` inside their transaction so that the audit
row commits or rolls back together with the change it describes.

Supported calls:
- record_audit(actor, action, entity_type, entity_id, ...)
- record_audit_no_actor(company, action, entity_type, entity_id, user=..., ...)

Snapshots are plain JSON values: Decimals and dates are stringified with
DjangoJSONEncoder so that the JSONField accepts them on every backend.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.forms.models import model_to_dict

from audit.models import AuditLog

logger = logging.getLogger(__name__)


def to_json_safe(values: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if values is None:
        return None
    return json.loads(json.dumps(values, cls=DjangoJSONEncoder))


def snapshot(instance, fields: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """Return a JSON-safe dict of the instance's concrete field values."""
    data = model_to_dict(instance, fields=list(fields) if fields else None)
    for name in ("created_at", "updated_at", "deleted_at"):
        if (fields is None or name in fields) and hasattr(instance, name):
            data[name] = getattr(instance, name)
    return to_json_safe(data)


def diff_values(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Field-level diff between two snapshots.

    Only keys present in ``new`` are compared, so partial update payloads
    produce a diff of the touched fields.

    Example:
        >>> diff_values({"name": "A", "x": 1}, {"name": "B"})
        {'name': {'from': 'A', 'to': 'B'}}
    """
    if not old or not new:
        return {}
    changes = {}
    for key, value in new.items():
        if old.get(key) != value:
            changes[key] = {"from": old.get(key), "to": value}
    return changes


def _record(
    *,
    company,
    user,
    action: str,
    entity_type: str,
    entity_id: Any,
    old_values=None,
    new_values=None,
    reason: str = "",
    cashbox=None,
    cashbox_transaction=None,
    ip_address: str = "",
    user_agent: str = "",
) -> AuditLog:
    old_values = to_json_safe(old_values)
    new_values = to_json_safe(new_values)
    changes = diff_values(old_values, new_values) or None

    entry = AuditLog.objects.create(
        company=company,
        user=user if (user is not None and getattr(user, "is_authenticated", False)) else None,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else "",
        cashbox=cashbox,
        cashbox_transaction=cashbox_transaction,
        old_values=old_values,
        new_values=new_values,
        changes=changes,
        reason=reason or "",
        ip_address=ip_address or "",
        user_agent=(user_agent or "")[:500],
    )
    logger.debug(
        "audit %s %s:%s",
        action,
        entity_type,
        entry.entity_id,
        extra={"company_id": company.id, "audit_id": entry.id},
    )
    return entry


def record_audit(actor, action: str, entity_type: str, entity_id: Any, **kwargs) -> AuditLog:
    """
    Record an audit entry on behalf of an ActorContext.

    Request origin (IP address, user agent) is taken from the actor.

    Example:
        record_audit(
            actor,
            AuditLog.Action.UPDATE,
            "cashbox",
            cashbox.id,
            old_values=before,
            new_values=after,
            reason="Lokasyon değişti",
            cashbox=cashbox,
        )
    """
    return _record(
        company=actor.company,
        user=actor.user,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        ip_address=getattr(actor, "ip_address", ""),
        user_agent=getattr(actor, "user_agent", ""),
        **kwargs,
    )


def record_audit_no_actor(company, action: str, entity_type: str, entity_id: Any, *, user=None, **kwargs) -> AuditLog:
    """Record an audit entry where no ActorContext exists (signup, background jobs)."""
    return _record(
        company=company,
        user=user,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        **kwargs,
    )
