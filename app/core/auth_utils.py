"""Authentication and authorization utilities"""
import logging
from typing import Optional
from app.core.policy import Decision, Outcome
from app.core.exceptions import Forbidden, InvalidInput, NotFound
from app.core.metrics import policy_denials

logger = logging.getLogger(__name__)

_ERRORS = {
    Outcome.FORBIDDEN: Forbidden,
    Outcome.NOT_FOUND: NotFound,
    Outcome.INVALID: InvalidInput,
}


def enforce(decision: Decision, actor_id: Optional[int] = None) -> Decision:

    if decision.allowed:
        return decision

    policy_denials.labels(outcome=str(decision.outcome)).inc()
    logger.warning(f"Policy refused actor {actor_id}: {decision.outcome} ({decision.reason})")
    raise _ERRORS[decision.outcome](decision.reason)


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise NotFound(f"{resource_name} with id {resource_id} not found")
        raise NotFound(f"{resource_name} not found")
