"""Request and response bodies for signup, login and identity lookups."""

from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    """Body of POST /signup and POST /login."""
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        cleaned = v.strip().lower()
        if "@" not in cleaned:
            raise ValueError("email must contain '@'")
        return cleaned


class TokenResponse(BaseModel):
    token: str = Field(description="Signed session token; send as 'Authorization: Bearer <token>'")


class MeResponse(BaseModel):
    user_id: int
    email: str


class UserIdResponse(BaseModel):
    user_id: int
