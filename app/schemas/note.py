from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from app.schemas.user import UserSnapshot


def _dedupe_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    related_user_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v):
        return _dedupe_tags(v)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v):
        return _dedupe_tags(v)


class NoteOut(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    author_name: Optional[str] = None
    related_user_id: Optional[int] = None
    related_user_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class NoteSummaryOut(BaseModel):
    agent: UserSnapshot
    total_notes: int
    latest_note_date: datetime
