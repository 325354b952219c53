from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bookstore.core.config import Settings
from bookstore.core.errors import ForbiddenError, UnauthorizedError
from bookstore.core.logging import get_logger
from bookstore.core.security import TokenIdentity, TokenVerifier
from bookstore.db.session import get_db
from bookstore.services.cover_store import CoverStore

_bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_cover_store(request: Request) -> CoverStore:
    return request.app.state.cover_store


def get_current_identity(
    request: Request,
    verify: Annotated[TokenVerifier, Depends(get_token_verifier)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> TokenIdentity:
    """
    Bearer token check.
    - 401 if the header is missing
    - 403 if the token is invalid or expired
    - Sets `request.state.identity`
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access denied, no token provided")

    try:
        identity = verify(credentials.credentials)
    except ForbiddenError:
        get_logger(__name__, request).info("Rejected bearer token")
        raise

    request.state.identity = identity
    return identity


DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
CurrentIdentity = Annotated[TokenIdentity, Depends(get_current_identity)]
Covers = Annotated[CoverStore, Depends(get_cover_store)]
