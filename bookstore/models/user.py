import uuid
from sqlalchemy import Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from bookstore.models.base import Base, TimestampMixin

#User
class User(TimestampMixin, Base):
    __tablename__: str = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
