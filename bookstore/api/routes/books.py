from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import ValidationError
from typing import Annotated, Any
import uuid
from starlette.datastructures import UploadFile
from starlette.status import HTTP_200_OK, HTTP_201_CREATED

from bookstore.api.deps import Covers, CurrentIdentity, DbSession
from bookstore.core.errors import InvalidInputError
from bookstore.schemas.book import BookCreate, BookCreated, BookListItem, BookRead, BookUpdate, BookUpdated
from bookstore.schemas.common import Envelope, MetaEnvelope, PageMeta, PagedEnvelope, Pagination
from bookstore.services.book_service import BookService
from bookstore.utils.pagination import clamp_pagination, page_links, total_pages

router = APIRouter(prefix="/books", tags=["books"])

# (field, accepted keys)
_REQUIRED_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("title", ("title",)),
    ("writer", ("writer",)),
    ("publisher", ("publisher",)),
    ("publication_year", ("publication_year", "publicationYear")),
    ("price", ("price",)),
    ("stock_quantity", ("stock_quantity", "stockQuantity")),
    ("genre_id", ("genre_id", "genreId")),
)


class BookSubmission:
    """Book fields and optional cover from a multipart form or a JSON body."""

    def __init__(self, fields: dict[str, Any], cover: UploadFile | None):
        self.fields: dict[str, Any] = fields
        self.cover: UploadFile | None = cover


async def read_book_submission(request: Request) -> BookSubmission:
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidInputError("Invalid input format") from e
        if not isinstance(body, dict):
            raise InvalidInputError("Invalid input format")
        return BookSubmission(body, None)

    form = await request.form()
    fields: dict[str, Any] = {}
    cover: UploadFile | None = None
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key == "cover" and value.filename:
                cover = value
        else:
            fields[key] = value
    return BookSubmission(fields, cover)


def _missing_fields(fields: dict[str, Any]) -> list[str]:
    missing: list[str] = []
    for name, keys in _REQUIRED_FIELDS:
        if all(fields.get(key) in (None, "") for key in keys):
            missing.append(name)
    return missing


@router.post("", response_model=Envelope[BookCreated], status_code=HTTP_201_CREATED)
def create_book(
    # token check runs before the body is read
    _identity: CurrentIdentity,
    submission: Annotated[BookSubmission, Depends(read_book_submission)],
    db: DbSession,
    covers: Covers,
    response: Response,
):
    missing = _missing_fields(submission.fields)
    if missing:
        raise InvalidInputError(
            f"Missing required fields: {', '.join(missing)}", details={"missing": missing}
        )
    try:
        data = BookCreate.model_validate(submission.fields)
    except ValidationError as e:
        raise InvalidInputError.from_validation(e) from e

    cover_path = covers.save(submission.cover) if submission.cover is not None else None
    try:
        book, created = BookService.create_book(db, data, cover_path=cover_path, covers=covers)
    except Exception:
        # no book refers to the new file
        covers.discard(cover_path)
        raise
    if not created:
        response.status_code = HTTP_200_OK
    return Envelope[BookCreated](
        message="Book added successfully" if created else "Book restored",
        data=BookCreated(id=book.id, title=book.title, created_at=book.created_at),
    )


@router.get("", response_model=PagedEnvelope[BookListItem])
def list_books(
    db: DbSession,
    search: Annotated[str | None, Query(description="matches title or writer")] = None,
    genre_id: uuid.UUID | None = None,
    sort: Annotated[str, Query(description="title | created_at")] = "title",
    order: Annotated[str, Query(description="asc | desc")] = "asc",
    page: int = 1,
    limit: int = 12,
):
    page_req = clamp_pagination(page, limit, default_limit=12)
    books, total = BookService.list_books(
        db,
        page_req,
        genre_id=genre_id,
        search=search,
        sort=sort,
        order=order,
    )
    return PagedEnvelope[BookListItem](
        message="Books fetched successfully",
        data=[BookListItem.from_book(b) for b in books],
        pagination=Pagination(
            page=page_req.page,
            limit=page_req.limit,
            total=total,
            totalPages=total_pages(total, page_req.limit),
        ),
    )


@router.get("/genre/{genre_id}", response_model=MetaEnvelope[BookRead])
def list_books_by_genre(
    genre_id: uuid.UUID,
    db: DbSession,
    title: str | None = None,
    writer: str | None = None,
    publisher: str | None = None,
    page: int = 1,
    limit: int = 5,
):
    page_req = clamp_pagination(page, limit, default_limit=5)
    books, total = BookService.list_books_by_genre(
        db, genre_id, page_req, title=title, writer=writer, publisher=publisher
    )
    # an empty genre still has one (empty) page
    pages = total_pages(total, page_req.limit) or 1
    prev_page, next_page = page_links(page_req.page, pages)
    return MetaEnvelope[BookRead](
        message="Get all book by genre successfully",
        data=[BookRead.from_book(b) for b in books],
        meta=PageMeta(
            page=page_req.page,
            limit=page_req.limit,
            total=total,
            totalPages=pages,
            prev_page=prev_page,
            next_page=next_page,
        ),
    )


@router.get("/{book_id}", response_model=Envelope[BookRead])
def get_book(book_id: uuid.UUID, db: DbSession):
    book = BookService.get_book(db, book_id)
    return Envelope[BookRead](message="Get book detail successfully", data=BookRead.from_book(book))


@router.patch("/{book_id}", response_model=Envelope[BookUpdated])
def update_book(
    book_id: uuid.UUID,
    data: BookUpdate,
    db: DbSession,
    _identity: CurrentIdentity,
):
    book = BookService.update_book(db, book_id, data)
    return Envelope[BookUpdated](
        message="Book updated successfully",
        data=BookUpdated(id=book.id, title=book.title, updated_at=book.updated_at),
    )


@router.delete("/{book_id}", response_model=Envelope[None])
def delete_book(book_id: uuid.UUID, db: DbSession, _identity: CurrentIdentity):
    BookService.delete_book(db, book_id)
    return Envelope[None](message="Book removed successfully")
