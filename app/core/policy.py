"""Access policy for messages, groups and private notes.

Every function here is a pure decision: it takes the acting identity and
whatever the caller already loaded from the store, and returns a ``Decision``
(or a filtered sequence). Nothing here touches the database or raises;
``app.core.auth_utils.enforce`` turns a refused decision into an HTTP error.

Existence disclosure: a resource the actor has no business knowing about is
reported as not found. ``FORBIDDEN`` is only returned where the answer is the
same whether or not the resource exists, or where the actor already knows it
does.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from app.core.enums import MessageChannel, UserRole

WHATSAPP_REDIRECT_MARKER = "📱 WhatsApp:"


class Outcome(str, Enum):
    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID = "invalid"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class NoteScope:
    author_id: int
    related_user_id: int


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    reason: str = ""
    scope: Optional[NoteScope] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == Outcome.ALLOW

    @classmethod
    def allow(cls, scope: Optional[NoteScope] = None) -> "Decision":
        return cls(Outcome.ALLOW, scope=scope)

    @classmethod
    def forbid(cls, reason: str) -> "Decision":
        return cls(Outcome.FORBIDDEN, reason)

    @classmethod
    def not_found(cls, reason: str) -> "Decision":
        return cls(Outcome.NOT_FOUND, reason)

    @classmethod
    def invalid(cls, reason: str) -> "Decision":
        return cls(Outcome.INVALID, reason)


# Direct messaging

def contactable_roles(actor_role: UserRole) -> frozenset:
    if actor_role == UserRole.AGENT:
        return frozenset({UserRole.USER, UserRole.AGENT})
    if actor_role == UserRole.USER:
        return frozenset({UserRole.AGENT})
    return frozenset()


def can_contact(actor_role: UserRole, target_role: UserRole) -> Decision:
    if target_role in contactable_roles(actor_role):
        return Decision.allow()
    if actor_role == UserRole.USER:
        return Decision.forbid("Users can only message agents")
    return Decision.forbid("Direct messaging is not available for this account")


def can_send_direct(actor_id: int, actor_role: UserRole, recipient) -> Decision:
    if recipient is None:
        return Decision.not_found("Recipient not found")
    decision = can_contact(actor_role, recipient.role)
    if not decision.allowed:
        return decision
    if recipient.id == actor_id:
        return Decision.invalid("Cannot send a direct message to yourself")
    if not recipient.is_active:
        return Decision.invalid("Recipient is not active")
    return Decision.allow()


def can_read_direct_thread(actor_role: UserRole, other) -> Decision:
    if other is None:
        return Decision.not_found("User not found")
    return can_contact(actor_role, other.role)


def is_participant(actor_id: int, message) -> bool:
    return actor_id in (message.sender_id, message.receiver_id)


# Groups

def can_manage_groups(actor_role: UserRole) -> Decision:
    if actor_role == UserRole.AGENT:
        return Decision.allow()
    return Decision.forbid("Only agents can manage groups")


def can_access_group(actor_role: UserRole, is_member: bool, group_exists: bool) -> Decision:
    """Read and post access to a group.

    A USER without membership is refused the same way whether or not the
    group exists.
    """
    if actor_role == UserRole.AGENT:
        if not group_exists:
            return Decision.not_found("Group not found")
        return Decision.allow()
    if actor_role == UserRole.USER and is_member and group_exists:
        return Decision.allow()
    return Decision.forbid("Access denied")


def is_visible_in_group(viewer_id: int, viewer_role: UserRole, sender_id: int, sender_role: UserRole) -> bool:
    if viewer_role == UserRole.AGENT:
        return True
    return sender_id == viewer_id or sender_role == UserRole.AGENT


# Channels

def classify_channel(content: str) -> MessageChannel:
    """Content carrying the legacy redirect marker is stored on the redirect channel."""
    if content.startswith(WHATSAPP_REDIRECT_MARKER):
        return MessageChannel.WHATSAPP_REDIRECT
    return MessageChannel.NORMAL


def is_redirect_artifact(message) -> bool:
    return message.channel == MessageChannel.WHATSAPP_REDIRECT


def visible_direct_messages(messages: Iterable) -> List:
    return [m for m in messages if not is_redirect_artifact(m)]


def visible_group_messages(viewer_id: int, viewer_role: UserRole, messages: Iterable) -> List:
    """Read-time filter over fetched group messages (``sender`` must be loaded)."""
    return [
        m for m in messages
        if not is_redirect_artifact(m)
        and is_visible_in_group(viewer_id, viewer_role, m.sender_id, m.sender.role)
    ]


def can_read_message(actor_id: int, actor_role: UserRole, message, is_member: bool = False) -> Decision:
    """Single-message read. Anything outside the actor's view is not found."""
    missing = Decision.not_found("Message not found")
    if message is None or is_redirect_artifact(message):
        return missing

    if message.group_id is None:
        if is_participant(actor_id, message):
            return Decision.allow()
        return missing

    if not can_access_group(actor_role, is_member, group_exists=True).allowed:
        return missing
    if not is_visible_in_group(actor_id, actor_role, message.sender_id, message.sender.role):
        return missing
    return Decision.allow()


# Private notes

def can_create_note(actor_role: UserRole) -> Decision:
    if actor_role == UserRole.AGENT:
        return Decision.allow()
    return Decision.forbid("Only agents can create private notes")


def can_mutate_note(actor_id: int, actor_role: UserRole, note) -> Decision:
    if actor_role != UserRole.AGENT:
        return Decision.forbid("Only agents can modify private notes")
    if note is None:
        return Decision.not_found("Note not found")
    if note.author_id != actor_id:
        return Decision.forbid("You can only modify your own notes")
    return Decision.allow()


def can_list_own_notes(actor_role: UserRole) -> Decision:
    if actor_role == UserRole.AGENT:
        return Decision.allow()
    return Decision.forbid("Only agents can access private notes")


def note_read_scope(
    actor_id: int,
    actor_role: UserRole,
    related_user_id: int,
    agent_id: Optional[int] = None,
) -> Decision:
    """Resolve which (author, subject) pair a note read may cover.

    Agents only ever see their own notes, whatever ``agent_id`` says. Users
    see notes about themselves one authoring agent at a time.
    """
    if actor_role == UserRole.AGENT:
        return Decision.allow(NoteScope(author_id=actor_id, related_user_id=related_user_id))

    if actor_role == UserRole.USER:
        if related_user_id != actor_id:
            return Decision.forbid("You can only view notes about yourself")
        if agent_id is None:
            return Decision.invalid("agent id required")
        return Decision.allow(NoteScope(author_id=agent_id, related_user_id=actor_id))

    return Decision.forbid("Invalid user role")


def can_view_note_summary(actor_role: UserRole) -> Decision:
    if actor_role == UserRole.USER:
        return Decision.allow()
    return Decision.forbid("Only users can access the notes summary")


# WhatsApp

def whatsapp_recipient_role(sender_role: UserRole) -> Optional[UserRole]:
    """Group links go to the counterpart role: agents reach users and vice versa."""
    if sender_role == UserRole.AGENT:
        return UserRole.USER
    if sender_role == UserRole.USER:
        return UserRole.AGENT
    return None
