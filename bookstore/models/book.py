from __future__ import annotations
import uuid
from decimal import Decimal
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, Numeric, Integer, CheckConstraint, Index, Text, Uuid, text
from bookstore.models.base import Base, SoftDeleteMixin, TimestampMixin
from bookstore.models.genre import Genre

#Book
class Book(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__: str = "books"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    writer: Mapped[str] = mapped_column(Text, nullable=False)
    publisher: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, server_default="0")
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    cover_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    genre_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("genres.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    genre: Mapped[Genre] = relationship(back_populates="books")

    __table_args__: tuple[CheckConstraint | Index, ...] = (
        CheckConstraint("price >= 0", name="books_price_nonneg"),
        CheckConstraint("stock_quantity >= 0", name="books_stock_nonneg"),
        Index(
            "books_title_active_uniq",
            "title",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
