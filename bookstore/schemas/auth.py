from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from typing import ClassVar
from datetime import datetime
import uuid


def _blank_to_none(v: object) -> object:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class RegisterRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None
    username: str | None = None

    @field_validator("email", "username", mode="before")
    @classmethod
    def strip_blank(cls, v: object) -> object:
        return _blank_to_none(v)


class LoginRequest(BaseModel):
    email: EmailStr | None = None
    password: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def strip_blank(cls, v: object) -> object:
        return _blank_to_none(v)


class RegisteredUser(BaseModel):
    user_id: uuid.UUID


class TokenRead(BaseModel):
    token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    id: uuid.UUID
    username: str | None
    email: str
    created_at: datetime
    updated_at: datetime

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)
