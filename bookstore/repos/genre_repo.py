from __future__ import annotations
import uuid
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookstore.models.base import utcnow
from bookstore.models.genre import Genre
from bookstore.utils.pagination import PageRequest


class GenreRepository:

    @staticmethod
    # Create a new genre
    def create(db: Session, name: str) -> Genre:
        genre = Genre(name=name)
        db.add(genre)
        db.commit()
        db.refresh(genre)
        return genre

    @staticmethod
    # List active genres
    def list(
        db: Session,
        page: PageRequest,
        q: str | None = None,
    ) -> tuple[list[Genre], int]:
        stmt = select(Genre).where(Genre.deleted_at.is_(None))

        if q:
            stmt = stmt.where(Genre.name.ilike(f"%{q.strip()}%"))

        total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        stmt = stmt.order_by(Genre.name.asc(), Genre.id.asc()).limit(page.limit).offset(page.offset)
        return list(db.scalars(stmt).all()), total

    @staticmethod
    # Get an active genre by ID
    def get_active(db: Session, genre_id: uuid.UUID) -> Genre | None:
        stmt = select(Genre).where(Genre.id == genre_id, Genre.deleted_at.is_(None))
        return db.scalars(stmt).first()

    @staticmethod
    # Get the active genre holding a name
    def get_active_by_name(db: Session, name: str) -> Genre | None:
        stmt = select(Genre).where(Genre.name == name, Genre.deleted_at.is_(None))
        return db.scalars(stmt).first()

    @staticmethod
    # Get the most recently deleted genre holding a name
    def get_deleted_by_name(db: Session, name: str) -> Genre | None:
        stmt = (
            select(Genre)
            .where(Genre.name == name, Genre.deleted_at.is_not(None))
            .order_by(Genre.deleted_at.desc())
        )
        return db.scalars(stmt).first()

    @staticmethod
    # Clear the soft-delete marker
    def restore(db: Session, genre: Genre) -> Genre:
        genre.deleted_at = None
        db.commit()
        db.refresh(genre)
        return genre

    @staticmethod
    def rename(db: Session, genre: Genre, name: str) -> Genre:
        genre.name = name
        db.commit()
        db.refresh(genre)
        return genre

    @staticmethod
    def soft_delete(db: Session, genre: Genre) -> None:
        genre.deleted_at = utcnow()
        db.commit()
