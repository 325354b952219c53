from fastapi import APIRouter, Response
from typing import Annotated
from fastapi import Query
import uuid
from starlette.status import HTTP_200_OK, HTTP_201_CREATED

from bookstore.api.deps import CurrentIdentity, DbSession
from bookstore.schemas.common import Envelope, PagedEnvelope, Pagination
from bookstore.schemas.genre import GenreCreate, GenreRead, GenreUpdate
from bookstore.services.genre_service import GenreService
from bookstore.utils.pagination import clamp_pagination, total_pages

router = APIRouter(prefix="/genres", tags=["genres"])


@router.post("", response_model=Envelope[GenreRead], status_code=HTTP_201_CREATED)
def create_genre(
    data: GenreCreate,
    db: DbSession,
    _identity: CurrentIdentity,
    response: Response,
):
    genre, created = GenreService.create_genre(db, data)
    if not created:
        response.status_code = HTTP_200_OK
    return Envelope[GenreRead](
        message="Genre created" if created else "Genre restored",
        data=GenreRead.model_validate(genre),
    )


@router.get("", response_model=PagedEnvelope[GenreRead])
def list_genres(
    db: DbSession,
    q: Annotated[str | None, Query(description="case-insensitive name filter")] = None,
    page: int = 1,
    limit: int = 12,
):
    page_req = clamp_pagination(page, limit, default_limit=12)
    genres, total = GenreService.list_genres(db, page_req, q=q)
    return PagedEnvelope[GenreRead](
        message="Genres fetched successfully",
        data=[GenreRead.model_validate(g) for g in genres],
        pagination=Pagination(
            page=page_req.page,
            limit=page_req.limit,
            total=total,
            totalPages=total_pages(total, page_req.limit),
        ),
    )


@router.get("/{genre_id}", response_model=Envelope[GenreRead])
def get_genre(genre_id: uuid.UUID, db: DbSession):
    genre = GenreService.get_genre(db, genre_id)
    return Envelope[GenreRead](
        message="Genre fetched successfully", data=GenreRead.model_validate(genre)
    )


@router.patch("/{genre_id}", response_model=Envelope[GenreRead])
def update_genre(
    genre_id: uuid.UUID,
    data: GenreUpdate,
    db: DbSession,
    _identity: CurrentIdentity,
):
    genre = GenreService.update_genre(db, genre_id, data)
    return Envelope[GenreRead](
        message="Genre updated successfully", data=GenreRead.model_validate(genre)
    )


@router.delete("/{genre_id}", response_model=Envelope[None])
def delete_genre(genre_id: uuid.UUID, db: DbSession, _identity: CurrentIdentity):
    GenreService.delete_genre(db, genre_id)
    return Envelope[None](message="Genre deleted successfully")
