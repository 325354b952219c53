from pydantic import BaseModel, ConfigDict, field_validator
from typing import ClassVar
from datetime import datetime
import uuid


def _clean_name(v: object) -> object:
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
    return v


# Genre create schema
class GenreCreate(BaseModel):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def trim_and_check(cls, v: object) -> object:
        return _clean_name(v)


# Genre patch schema
class GenreUpdate(BaseModel):
    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def trim_and_check(cls, v: object) -> object:
        return _clean_name(v)


# Genre read schema
class GenreRead(BaseModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


class GenreBrief(BaseModel):
    id: uuid.UUID
    name: str

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)
