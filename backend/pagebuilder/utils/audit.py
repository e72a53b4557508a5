from flask import current_app, g
from pagebuilder.extensions import db
from pagebuilder.models.audit_log import AuditLog
from typing import Optional

def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None,
    actor_id: Optional[str] = None,
):
    if not current_app.config.get("AUDIT_ENABLED", True):
        return
    if entity_id is None:
        return  # Nothing to attach the entry to
    log = AuditLog()

    log.actor_id = actor_id or getattr(g, "current_user_id", None)
    log.action = action
    log.entity_type = entity_type
    log.entity_id = entity_id
    log.payload = payload or {}

    db.session.add(log)
