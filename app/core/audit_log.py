"""Audit trail for state-changing operations"""
import hashlib
import json
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.audit import Audit
from app.core.enums import ActorType, AuditAction
from app.core.metrics import audit_logs_created

logger = logging.getLogger(__name__)


def payload_hash(payload: dict) -> str:
    payload_str = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(payload_str.encode()).hexdigest()


async def log_audit(
    db: AsyncSession,
    actor_id: int,
    action: AuditAction,
    payload: Optional[dict] = None,
    actor_type: ActorType = ActorType.USER,
) -> None:

    try:
        if payload is None:
            payload = {}

        if hasattr(payload, "model_dump"):
            payload_dict = payload.model_dump(exclude_unset=True)
        elif isinstance(payload, dict):
            payload_dict = payload
        else:
            payload_dict = {}

        audit_record = Audit(
            actor_id=int(actor_id),
            actor_type=str(actor_type),
            endpoint=str(action),
            payload_hash=payload_hash(payload_dict),
        )

        db.add(audit_record)
        await db.flush()
        audit_logs_created.labels(action=str(action)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
