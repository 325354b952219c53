import uuid
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.core.config import Settings
from bookstore.core.errors import ConflictError, InvalidInputError, NotFoundError, UnauthorizedError
from bookstore.core.logging import get_logger
from bookstore.core.security import hash_password, issue_token, verify_password
from bookstore.models.user import User
from bookstore.repos.user_repo import UserRepository
from bookstore.schemas.auth import LoginRequest, RegisterRequest

logger = get_logger(__name__)


class AuthService:
    @staticmethod
    # Register user; email and non-null username must be unused
    def register(db: Session, data: RegisterRequest) -> User:
        if not data.email or not data.password:
            raise InvalidInputError("Email and password are required")

        if UserRepository.find_conflicting(db, data.email, data.username):
            raise ConflictError("Email or username already exists")

        try:
            return UserRepository.create(
                db,
                email=data.email,
                password_hash=hash_password(data.password),
                username=data.username,
            )
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Email or username already exists") from e

    @staticmethod
    # Check credentials and sign a token
    def login(db: Session, settings: Settings, data: LoginRequest) -> str:
        if not data.email or not data.password:
            raise InvalidInputError("Email and password are required")

        user = UserRepository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login attempt")
            raise UnauthorizedError("Invalid email or password")

        return issue_token(settings, user.id)

    @staticmethod
    def get_profile(db: Session, user_id: uuid.UUID) -> User:
        user = UserRepository.get(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
