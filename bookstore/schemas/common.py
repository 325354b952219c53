from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


# Success envelope
class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: T | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class PageMeta(Pagination):
    prev_page: int | None = None
    next_page: int | None = None


# List envelope with `pagination`
class PagedEnvelope(Envelope[list[T]], Generic[T]):
    pagination: Pagination


# List envelope with `meta` (prev/next links)
class MetaEnvelope(Envelope[list[T]], Generic[T]):
    meta: PageMeta
