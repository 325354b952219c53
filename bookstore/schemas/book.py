from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import ClassVar
from typing_extensions import Self
from datetime import datetime
from decimal import Decimal
import uuid

from bookstore.models.book import Book

_TEXT_FIELDS = ("title", "writer", "publisher")
# fields that may be omitted from a patch but never set to null
_NOT_NULL_FIELDS = (*_TEXT_FIELDS, "publication_year", "price", "stock_quantity", "genre_id")


# Book base schema; accepts snake_case and camelCase keys
class BookBase(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(populate_by_name=True)

    @field_validator(*_TEXT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def trim_and_check(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("value cannot be empty")
        return v

    @field_validator("price", check_fields=False)
    @classmethod
    def non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("price must be >= 0")
        return v

    @field_validator("stock_quantity", check_fields=False)
    @classmethod
    def non_negative_stock(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("stock_quantity must be >= 0")
        return v


# Book create schema
class BookCreate(BookBase):
    title: str
    writer: str
    publisher: str
    publication_year: int = Field(validation_alias=AliasChoices("publication_year", "publicationYear"))
    description: str | None = None
    price: Decimal
    stock_quantity: int = Field(validation_alias=AliasChoices("stock_quantity", "stockQuantity"))
    genre_id: uuid.UUID = Field(validation_alias=AliasChoices("genre_id", "genreId"))


# Book patch schema
class BookUpdate(BookBase):
    title: str | None = None
    writer: str | None = None
    publisher: str | None = None
    publication_year: int | None = Field(
        default=None, validation_alias=AliasChoices("publication_year", "publicationYear")
    )
    description: str | None = None
    price: Decimal | None = None
    stock_quantity: int | None = Field(
        default=None, validation_alias=AliasChoices("stock_quantity", "stockQuantity")
    )
    genre_id: uuid.UUID | None = Field(
        default=None, validation_alias=AliasChoices("genre_id", "genreId")
    )

    @model_validator(mode="after")
    def no_null_required(self) -> Self:
        for name in _NOT_NULL_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# Book read schemas
class BookRead(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    description: str | None
    publication_year: int
    price: float
    stock_quantity: int
    cover_path: str | None = None
    genre_id: uuid.UUID
    genre: str | None = None

    @classmethod
    def from_book(cls, book: Book) -> Self:
        data = {name: getattr(book, name) for name in cls.model_fields if name != "genre"}
        data["genre"] = book.genre.name if book.genre is not None else None
        return cls.model_validate(data)


class BookListItem(BookRead):
    created_at: datetime


class BookCreated(BaseModel):
    id: uuid.UUID
    title: str
    created_at: datetime


class BookUpdated(BaseModel):
    id: uuid.UUID
    title: str
    updated_at: datetime
