from sqlalchemy import Column, String, Text, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import Base, BaseModel, UTCDateTime, utcnow


class Group(BaseModel):
    __tablename__ = "groups"
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    creator = relationship("User", lazy="joined")
    memberships = relationship(
        "GroupMember",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GroupMember.joined_at",
    )


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("user_id", "group_id", name="uq_group_members_user_group"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at = Column(UTCDateTime, default=utcnow, nullable=False)

    user = relationship("User", lazy="joined")
    group = relationship("Group", back_populates="memberships")
