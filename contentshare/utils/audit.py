from typing import Optional, Dict, Any
from flask import current_app, request

from ..extensions import db
from ..models.audit_log import AuditLog
from .identity import current_subject

def audit_log(
    action: str,
    entity_type: Optional[str] = None,
    entity_id=None,
    details: Optional[Dict[str, Any]] = None,
    actor_user_id=None,
) -> None:
    """Add an audit row to the current session; committed with the caller's work."""
    subject = current_subject()

    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    ua = request.headers.get("User-Agent")

    log = AuditLog(
        actor_user_id=actor_user_id or subject.id,
        actor_role=subject.role.value,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        ip_address=ip,
        user_agent=ua[:255] if ua else None,
        details=details or None,
    )
    db.session.add(log)


def safe_audit(action: str, entity_type: str, entity_id=None, details: dict | None = None, actor_user_id=None):
    """
    Best-effort audit for paths that do not otherwise write (denials, failed logins).
    Does not break the endpoint if auditing fails.
    """
    try:
        audit_log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
            actor_user_id=actor_user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Audit logging failed: %s", action)
