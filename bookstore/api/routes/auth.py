from fastapi import APIRouter
from starlette.status import HTTP_201_CREATED

from bookstore.api.deps import AppSettings, CurrentIdentity, DbSession
from bookstore.schemas.auth import LoginRequest, RegisterRequest, RegisteredUser, TokenRead, UserRead
from bookstore.schemas.common import Envelope
from bookstore.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Envelope[RegisteredUser], status_code=HTTP_201_CREATED)
def register(data: RegisterRequest, db: DbSession):
    user = AuthService.register(db, data)
    return Envelope[RegisteredUser](message="User registered", data=RegisteredUser(user_id=user.id))


@router.post("/login", response_model=Envelope[TokenRead])
def login(data: LoginRequest, db: DbSession, settings: AppSettings):
    token = AuthService.login(db, settings, data)
    return Envelope[TokenRead](message="Login successful", data=TokenRead(token=token))


@router.get("/me", response_model=Envelope[UserRead])
def me(db: DbSession, identity: CurrentIdentity):
    user = AuthService.get_profile(db, identity.user_id)
    return Envelope[UserRead](message="User fetched successfully", data=UserRead.model_validate(user))
