from sqlalchemy import Column, String, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class PrivateNote(BaseModel):
    __tablename__ = "private_notes"
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    related_user_id = Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)

    author = relationship("User", foreign_keys=[author_id], lazy="joined")
    related_user = relationship("User", foreign_keys=[related_user_id], lazy="joined")
