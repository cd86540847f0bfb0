from app.models.user import User
from app.models.group import Group, GroupMember
from app.models.message import Message
from app.models.note import PrivateNote
from app.schemas.user import UserOut, UserSnapshot
from app.schemas.group import GroupOut, MemberOut
from app.schemas.message import DirectMessageOut, MessageOut
from app.schemas.note import NoteOut


def build_user_response(user: User, include_phone: bool = True) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone if include_phone else None,
        role=user.role,
        is_active=user.is_active,
        created_at=user.created_at,
    )


def build_user_snapshot(user: User) -> UserSnapshot:
    return UserSnapshot(id=user.id, name=user.name, role=user.role)


def build_message_response(message: Message) -> MessageOut:
    return MessageOut(
        id=message.id,
        content=message.content,
        channel=message.channel,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        group_id=message.group_id,
        created_at=message.created_at,
        sender=build_user_snapshot(message.sender),
    )


def build_direct_message_response(message: Message, sender: User, recipient: User) -> DirectMessageOut:
    return DirectMessageOut(
        id=message.id,
        content=message.content,
        channel=message.channel,
        sender_id=message.sender_id,
        receiver_id=message.receiver_id,
        created_at=message.created_at,
        sender=build_user_snapshot(sender),
        recipient=build_user_snapshot(recipient),
    )


def build_member_response(membership: GroupMember) -> MemberOut:
    return MemberOut(
        id=membership.user.id,
        name=membership.user.name,
        email=membership.user.email,
        role=membership.user.role,
        joined_at=membership.joined_at,
    )


def build_group_response(group: Group, message_count: int = 0, include_members: bool = True) -> GroupOut:
    memberships = list(group.memberships) if include_members else []
    return GroupOut(
        id=group.id,
        name=group.name,
        description=group.description,
        created_by=group.created_by,
        creator=build_user_snapshot(group.creator) if group.creator else None,
        created_at=group.created_at,
        updated_at=group.updated_at,
        member_count=len(memberships),
        message_count=message_count,
        members=[build_member_response(m) for m in memberships],
    )


def build_note_response(note: PrivateNote) -> NoteOut:
    return NoteOut(
        id=note.id,
        title=note.title,
        content=note.content,
        author_id=note.author_id,
        author_name=note.author.name if note.author else None,
        related_user_id=note.related_user_id,
        related_user_name=note.related_user.name if note.related_user else None,
        tags=list(note.tags or []),
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def build_message_response_list(messages: list) -> list:
    return [build_message_response(m) for m in messages]


def build_note_response_list(notes: list) -> list:
    return [build_note_response(n) for n in notes]
