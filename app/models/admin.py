from sqlalchemy import Column, String
from app.models.base import BaseModel


class Admin(BaseModel):
    __tablename__ = "admins"
    username = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
