"""
Brainboard Backend: Board Pydantic Schemas
==========================================

What:  Request/response models for the board endpoints.

Two rename/delete forms exist: `/boards/{id}` with the id in the path, and the
collection form `/boards` carrying the id in the body. Both use the schemas
below; `BoardRef` is the body of the collection form.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from brainboard.schemas.card import CardResponse


class BoardCreate(BaseModel):
    """Body of POST /boards and PUT /boards/{id}."""
    title: str = Field(max_length=255, description="Board title; surrounding whitespace is trimmed")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("title must not be empty")
        return cleaned


class BoardRef(BaseModel):
    """Body of DELETE /boards (collection form)."""
    id: int


class BoardRename(BoardCreate):
    """Body of PUT /boards (collection form)."""
    id: int


class BoardResponse(BaseModel):
    id: int
    title: str
    owner_id: int
    created_at: datetime
    thumbnail_url: Optional[str] = None

    model_config = {"from_attributes": True}


class BoardListItem(BoardResponse):
    """A board in GET /boards, annotated with the caller's relationship to it."""
    is_owner: bool
    permission: str


class BoardDetail(BoardResponse):
    """GET /boards/{id} and GET /share/{token}: metadata plus every card."""
    permission: str
    cards: List[CardResponse] = Field(default_factory=list)


class ThumbnailResponse(BaseModel):
    thumbnail_url: str
