from __future__ import annotations
import uuid
from collections.abc import Iterable, Mapping
from typing import cast
from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.expression import ColumnElement

from bookstore.models.base import utcnow
from bookstore.models.book import Book
from bookstore.schemas.book import BookCreate
from bookstore.utils.pagination import PageRequest

SORTABLE_COLUMNS = {"title": "title", "created_at": "created_at", "createdAt": "created_at"}


def _count(db: Session, stmt: Select[tuple[Book]]) -> int:
    return db.scalar(select(func.count()).select_from(stmt.subquery())) or 0


class BookRepository:
    @staticmethod

    # Create a new book
    def create(db: Session, data: BookCreate, cover_path: str | None = None) -> Book:
        book = Book(**data.model_dump(), cover_path=cover_path)
        db.add(book)
        db.commit()
        db.refresh(book)
        return book

    @staticmethod
    # List active books
    def list(
        db: Session,
        page: PageRequest,
        genre_id: uuid.UUID | None = None,
        search: str | None = None,
        sort: str = "title",
        order: str = "asc",
    ) -> tuple[list[Book], int]:
        stmt = select(Book).where(Book.deleted_at.is_(None))

        # filters
        if genre_id:
            stmt = stmt.where(Book.genre_id == genre_id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.writer.ilike(pattern)))

        total = _count(db, stmt)

        # sorting; unknown values fall back to title asc
        sort_column = cast(ColumnElement[object], getattr(Book, SORTABLE_COLUMNS.get(sort, "title")))
        ordering = sort_column.desc() if order == "desc" else sort_column.asc()
        stmt = stmt.order_by(ordering, Book.id.asc())

        # pagination
        stmt = stmt.options(selectinload(Book.genre)).limit(page.limit).offset(page.offset)

        return list(db.scalars(stmt).all()), total

    @staticmethod
    # List active books of one genre, newest first
    def list_by_genre(
        db: Session,
        genre_id: uuid.UUID,
        page: PageRequest,
        title: str | None = None,
        writer: str | None = None,
        publisher: str | None = None,
    ) -> tuple[list[Book], int]:
        stmt = select(Book).where(Book.deleted_at.is_(None), Book.genre_id == genre_id)

        if title:
            stmt = stmt.where(Book.title.ilike(f"%{title.strip()}%"))
        if writer:
            stmt = stmt.where(Book.writer.ilike(f"%{writer.strip()}%"))
        if publisher:
            stmt = stmt.where(Book.publisher.ilike(f"%{publisher.strip()}%"))

        total = _count(db, stmt)
        stmt = (
            stmt.options(selectinload(Book.genre))
            .order_by(Book.created_at.desc(), Book.id.asc())
            .limit(page.limit)
            .offset(page.offset)
        )
        return list(db.scalars(stmt).all()), total

    @staticmethod
    # Get an active book by ID
    def get_active(db: Session, book_id: uuid.UUID) -> Book | None:
        stmt = (
            select(Book)
            .where(Book.id == book_id, Book.deleted_at.is_(None))
            .options(selectinload(Book.genre))
        )
        return db.scalars(stmt).first()

    @staticmethod
    # Active books for a batch of IDs, keyed by ID
    def map_active_by_ids(db: Session, book_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Book]:
        ids = set(book_ids)
        if not ids:
            return {}
        stmt = select(Book).where(Book.id.in_(ids), Book.deleted_at.is_(None))
        return {book.id: book for book in db.scalars(stmt).all()}

    @staticmethod
    # Get the active book holding a title
    def get_active_by_title(db: Session, title: str) -> Book | None:
        stmt = select(Book).where(Book.title == title, Book.deleted_at.is_(None))
        return db.scalars(stmt).first()

    @staticmethod
    # Get the most recently deleted book holding a title
    def get_deleted_by_title(db: Session, title: str) -> Book | None:
        stmt = (
            select(Book)
            .where(Book.title == title, Book.deleted_at.is_not(None))
            .order_by(Book.deleted_at.desc())
        )
        return db.scalars(stmt).first()

    @staticmethod
    # Apply a field patch
    def update(db: Session, book: Book, values: Mapping[str, object]) -> Book:
        for field, value in values.items():
            setattr(book, field, value)
        db.commit()
        db.refresh(book)
        return book

    @staticmethod
    # Clear the soft-delete marker and overwrite fields
    def restore(db: Session, book: Book, values: Mapping[str, object]) -> Book:
        for field, value in values.items():
            setattr(book, field, value)
        book.deleted_at = None
        db.commit()
        db.refresh(book)
        return book

    @staticmethod
    def soft_delete(db: Session, book: Book) -> None:
        book.deleted_at = utcnow()
        db.commit()

    @staticmethod
    # Decrement stock only if enough is left (no read-modify-write)
    def try_decrement_stock(db: Session, book_id: uuid.UUID, qty: int) -> bool:
        """Pure UPDATE (caller owns the transaction). True when one row changed."""
        stmt = (
            update(Book)
            .where(
                Book.id == book_id,
                Book.deleted_at.is_(None),
                Book.stock_quantity >= qty,
            )
            .values(stock_quantity=Book.stock_quantity - qty)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[object], db.execute(stmt))
        return result.rowcount == 1

    @staticmethod
    # Current stock, bypassing the identity map
    def get_stock(db: Session, book_id: uuid.UUID) -> int | None:
        return db.scalar(select(Book.stock_quantity).where(Book.id == book_id))
