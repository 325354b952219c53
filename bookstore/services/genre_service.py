from __future__ import annotations
import uuid
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.core.errors import ConflictError, NotFoundError
from bookstore.core.logging import get_logger
from bookstore.models.genre import Genre
from bookstore.repos.genre_repo import GenreRepository
from bookstore.schemas.genre import GenreCreate, GenreUpdate
from bookstore.utils.pagination import PageRequest

logger = get_logger(__name__)


class GenreService:
    @staticmethod
    # Create genre, or bring back a soft-deleted one with the same name.
    # Returns (genre, created).
    def create_genre(db: Session, data: GenreCreate) -> tuple[Genre, bool]:
        if GenreRepository.get_active_by_name(db, data.name):
            raise ConflictError("Genre name already exists")

        deleted = GenreRepository.get_deleted_by_name(db, data.name)
        if deleted is not None:
            logger.info("Restoring soft-deleted genre %s", deleted.id)
            return GenreRepository.restore(db, deleted), False

        try:
            return GenreRepository.create(db, data.name), True
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Genre name already exists") from e

    @staticmethod
    # List genres
    def list_genres(db: Session, page: PageRequest, q: str | None = None) -> tuple[list[Genre], int]:
        return GenreRepository.list(db, page, q=q)

    @staticmethod
    def get_genre(db: Session, genre_id: uuid.UUID) -> Genre:
        genre = GenreRepository.get_active(db, genre_id)
        if genre is None:
            raise NotFoundError("Genre not found")
        return genre

    @staticmethod
    # Rename genre; only active genres own a name
    def update_genre(db: Session, genre_id: uuid.UUID, data: GenreUpdate) -> Genre:
        genre = GenreService.get_genre(db, genre_id)
        if data.name is None or data.name == genre.name:
            return genre

        holder = GenreRepository.get_active_by_name(db, data.name)
        if holder is not None and holder.id != genre.id:
            raise ConflictError("Genre name already exists")

        try:
            return GenreRepository.rename(db, genre, data.name)
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Genre name already exists") from e

    @staticmethod
    def delete_genre(db: Session, genre_id: uuid.UUID) -> None:
        genre = GenreService.get_genre(db, genre_id)
        GenreRepository.soft_delete(db, genre)
