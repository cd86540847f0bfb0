from sqlalchemy import Column, Text, ForeignKey, Enum, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import MessageChannel


class Message(BaseModel):
    __tablename__ = "messages"
    __table_args__ = (
        # a message targets exactly one of a group or a receiver
        CheckConstraint(
            "(group_id IS NOT NULL AND receiver_id IS NULL) OR (group_id IS NULL AND receiver_id IS NOT NULL)",
            name="ck_messages_single_target",
        ),
        Index("ix_messages_created_at", "created_at"),
    )

    content = Column(Text, nullable=False)
    channel = Column(Enum(MessageChannel), nullable=False, default=MessageChannel.NORMAL)
    sender_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True)
    receiver_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)

    sender = relationship("User", foreign_keys=[sender_id], lazy="joined")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="joined")
