"""Access grant and share token request/response bodies."""

from datetime import datetime

from pydantic import BaseModel, field_validator

GRANTABLE_PERMISSIONS = ("read", "edit")


def _grantable(v: str) -> str:
    cleaned = v.strip().lower()
    if cleaned not in GRANTABLE_PERMISSIONS:
        raise ValueError("permission must be 'read' or 'edit'")
    return cleaned


class AccessGrantCreate(BaseModel):
    user_id: int
    permission: str

    @field_validator("permission")
    @classmethod
    def validate_permission(cls, v: str) -> str:
        return _grantable(v)


class AccessRevoke(BaseModel):
    user_id: int


class AccessGrantResponse(BaseModel):
    id: int
    board_id: int
    user_id: int
    email: str
    permission: str
    created_at: datetime


class ShareCreate(BaseModel):
    permission: str

    @field_validator("permission")
    @classmethod
    def validate_permission(cls, v: str) -> str:
        return _grantable(v)


class ShareRevoke(BaseModel):
    share_id: int


class ShareResponse(BaseModel):
    id: int
    board_id: int
    token: str
    permission: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PermissionResponse(BaseModel):
    permission: str
