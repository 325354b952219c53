from __future__ import annotations
import uuid
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.core.errors import ConflictError, NotFoundError
from bookstore.core.logging import get_logger
from bookstore.models.book import Book
from bookstore.repos.book_repo import BookRepository
from bookstore.repos.genre_repo import GenreRepository
from bookstore.schemas.book import BookCreate, BookUpdate
from bookstore.services.cover_store import CoverStore
from bookstore.utils.pagination import PageRequest

logger = get_logger(__name__)


def _ensure_active_genre(db: Session, genre_id: uuid.UUID) -> None:
    if GenreRepository.get_active(db, genre_id) is None:
        raise NotFoundError("Genre not found")


class BookService:
    @staticmethod
    # Create book, or restore a soft-deleted book with the same title.
    # Returns (book, created).
    def create_book(
        db: Session,
        data: BookCreate,
        cover_path: str | None = None,
        covers: CoverStore | None = None,
    ) -> tuple[Book, bool]:
        _ensure_active_genre(db, data.genre_id)

        if BookRepository.get_active_by_title(db, data.title):
            raise ConflictError("Book already exists")

        deleted = BookRepository.get_deleted_by_title(db, data.title)
        if deleted is not None:
            values: dict[str, object] = data.model_dump()
            replaced_cover: str | None = None
            if cover_path is not None:
                values["cover_path"] = cover_path
                replaced_cover = deleted.cover_path
            logger.info("Restoring soft-deleted book %s", deleted.id)
            book = BookRepository.restore(db, deleted, values)
            # old file goes only once the new path is committed
            if covers is not None and replaced_cover != cover_path:
                covers.discard(replaced_cover)
            return book, False

        try:
            return BookRepository.create(db, data, cover_path=cover_path), True
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Book already exists") from e

    @staticmethod
    # List books
    def list_books(
        db: Session,
        page: PageRequest,
        genre_id: uuid.UUID | None = None,
        search: str | None = None,
        sort: str = "title",
        order: str = "asc",
    ) -> tuple[list[Book], int]:
        return BookRepository.list(
            db,
            page,
            genre_id=genre_id,
            search=search,
            sort=sort,
            order=order,
        )

    @staticmethod
    def list_books_by_genre(
        db: Session,
        genre_id: uuid.UUID,
        page: PageRequest,
        title: str | None = None,
        writer: str | None = None,
        publisher: str | None = None,
    ) -> tuple[list[Book], int]:
        _ensure_active_genre(db, genre_id)
        return BookRepository.list_by_genre(
            db, genre_id, page, title=title, writer=writer, publisher=publisher
        )

    @staticmethod
    def get_book(db: Session, book_id: uuid.UUID) -> Book:
        book = BookRepository.get_active(db, book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    @staticmethod
    # Partial update; a title held by another active book is a conflict
    def update_book(db: Session, book_id: uuid.UUID, data: BookUpdate) -> Book:
        book = BookService.get_book(db, book_id)
        values = data.model_dump(exclude_unset=True)

        title = values.get("title")
        if title is not None and title != book.title:
            holder = BookRepository.get_active_by_title(db, title)
            if holder is not None and holder.id != book.id:
                raise ConflictError("Book title already exists")

        genre_id = values.get("genre_id")
        if genre_id is not None and genre_id != book.genre_id:
            _ensure_active_genre(db, genre_id)

        try:
            return BookRepository.update(db, book, values)
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Book title already exists") from e

    @staticmethod
    def delete_book(db: Session, book_id: uuid.UUID) -> None:
        book = BookService.get_book(db, book_id)
        BookRepository.soft_delete(db, book)
