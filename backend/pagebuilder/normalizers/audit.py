# pagebuilder/normalizers/audit.py
from __future__ import annotations

from typing import Dict, Any
from pagebuilder.models.audit_log import AuditLog


def normalize_audit_log(log: AuditLog) -> Dict[str, Any]:
    """
    Normalizes an AuditLog model into API-safe JSON.

    Notes:
    - payload is assumed to be JSON-serializable
    """

    if not log:
        raise ValueError("AuditLog cannot be None")

    return {
        "id": log.id,
        "actorId": log.actor_id,
        "action": log.action,
        "entityType": log.entity_type,
        "entityId": log.entity_id,
        "payload": log.payload or {},
        "createdAt": log.created_at.isoformat(),
    }
