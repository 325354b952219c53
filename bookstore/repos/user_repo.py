import uuid
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookstore.models.user import User


class UserRepository:

    @staticmethod
    # Create a new user from an already hashed password
    def create(db: Session, email: str, password_hash: str, username: str | None = None) -> User:
        user = User(email=email, username=username, password_hash=password_hash)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get(db: Session, user_id: uuid.UUID) -> User | None:
        return db.get(User, user_id)

    @staticmethod
    # Get a user by email
    def get_by_email(db: Session, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return db.scalars(stmt).first()

    @staticmethod
    # Any user holding the email or (non-null) username
    def find_conflicting(db: Session, email: str, username: str | None) -> User | None:
        stmt = select(User).where(User.email == email)
        if username is not None:
            stmt = select(User).where((User.email == email) | (User.username == username))
        return db.scalars(stmt).first()
