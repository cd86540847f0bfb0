"""WhatsApp redirect links.

Nothing is transmitted from here: each recipient gets a ``wa.me`` link that
the sender opens by hand. The request is kept as one message on the
redirect channel so it stays out of every transcript.
"""
import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_log import log_audit
from app.core.auth_utils import enforce
from app.core.enums import AuditAction, MessageChannel, WhatsAppFailure
from app.core.exceptions import InvalidInput, InvalidPhone
from app.core.metrics import whatsapp_links
from app.core.policy import can_access_group, can_send_direct, whatsapp_recipient_role
from app.core.security import Principal
from app.schemas.whatsapp import RecipientLink, WhatsAppDelivery, WhatsAppSendIn, WhatsAppSendOut, WhatsAppStatusOut
from app.services.accounts import get_user
from app.services.groups import get_membership, load_group
from app.services.messages import load_sender, store_message
from app.services.phone import create_whatsapp_url, format_phone_display

logger = logging.getLogger(__name__)

READY = "ready"
FAILED = "failed"

CAPABILITIES = [
    "direct-message-redirect",
    "group-message-urls",
    "phone-number-formatting",
    "url-generation",
    "user-to-agent-messages",
    "agent-to-user-messages",
]


def build_recipient_link(user, message: str) -> RecipientLink:
    link = RecipientLink(user_id=user.id, name=user.name, role=user.role, phone=user.phone, status=FAILED)
    if not user.phone:
        link.error = WhatsAppFailure.NO_PHONE_NUMBER
    else:
        link.phone_display = format_phone_display(user.phone)
        try:
            link.whatsapp_url = create_whatsapp_url(user.phone, message)
            link.status = READY
        except InvalidPhone:
            link.error = WhatsAppFailure.INVALID_PHONE_FORMAT

    whatsapp_links.labels(status=link.status).inc()
    return link


def summarize(links: List[RecipientLink]) -> WhatsAppDelivery:
    ready = sum(1 for link in links if link.status == READY)
    return WhatsAppDelivery(ready=ready, failed=len(links) - ready, recipients=links)


async def send_links(db: AsyncSession, principal: Principal, payload: WhatsAppSendIn) -> WhatsAppSendOut:
    message = payload.message.strip()
    if not message:
        raise InvalidInput("Message content is required")

    if payload.group_id is not None:
        membership = await get_membership(db, principal.id, payload.group_id)
        group = await load_group(db, payload.group_id)
        enforce(can_access_group(principal.role, membership is not None, group is not None), principal.id)
        sender = await load_sender(db, principal)

        target_role = whatsapp_recipient_role(principal.role)
        recipients = [
            m.user for m in group.memberships
            if m.user.role == target_role and m.user.id != principal.id
        ]
        await store_message(db, sender, message, group=group, channel=MessageChannel.WHATSAPP_REDIRECT)
        summary_text = f"WhatsApp links generated for {len(recipients)} {str(target_role).lower()}s"
    else:
        target = await get_user(db, payload.direct_user_id)
        enforce(can_send_direct(principal.id, principal.role, target), principal.id)
        sender = await load_sender(db, principal)

        recipients = [target]
        await store_message(db, sender, message, receiver=target, channel=MessageChannel.WHATSAPP_REDIRECT)
        summary_text = "WhatsApp link generated for direct message"

    delivery = summarize([build_recipient_link(user, message) for user in recipients])

    await log_audit(db, principal.id, AuditAction.WHATSAPP_LINK, {
        "group_id": payload.group_id,
        "direct_user_id": payload.direct_user_id,
        "ready": delivery.ready,
        "failed": delivery.failed,
    })
    await db.commit()

    logger.info(f"User {principal.id} generated {delivery.ready} WhatsApp links ({delivery.failed} failed)")
    return WhatsAppSendOut(
        message=summary_text,
        delivery=delivery,
        group_id=payload.group_id,
        direct_user_id=payload.direct_user_id,
        message_type=payload.message_type,
        sender_role=principal.role,
        timestamp=datetime.now(timezone.utc),
    )


def integration_status() -> WhatsAppStatusOut:
    return WhatsAppStatusOut(status="active", integration="whatsapp-redirect", capabilities=CAPABILITIES)
