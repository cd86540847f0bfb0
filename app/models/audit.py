from sqlalchemy import Column, String, Integer
from app.models.base import BaseModel


class Audit(BaseModel):
    __tablename__ = "audits"

    # no foreign key: audit rows outlive the accounts they describe
    actor_id = Column(Integer, nullable=False, index=True)
    actor_type = Column(String(16), nullable=False)

    endpoint = Column(String(255), nullable=False)
    payload_hash = Column(String(128), nullable=False)
