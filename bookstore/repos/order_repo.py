import uuid
from decimal import Decimal
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, selectinload

from bookstore.models.book import Book
from bookstore.models.genre import Genre
from bookstore.models.order import Order, OrderItem


def _with_details(stmt: Select[tuple[Order]]) -> Select[tuple[Order]]:
    # history keeps soft-deleted books and genres
    return stmt.options(
        selectinload(Order.user),
        selectinload(Order.items).selectinload(OrderItem.book).selectinload(Book.genre),
    ).execution_options(populate_existing=True)


class OrderRepository:
    """Repository for Order model."""

    @staticmethod
    # Create an order row (caller commits)
    def create(db: Session, user_id: uuid.UUID) -> Order:
        order = Order(user_id=user_id)
        db.add(order)
        db.flush()  # ensure order.id
        return order

    @staticmethod
    # Add one line item (caller commits)
    def add_item(
        db: Session, order_id: uuid.UUID, book_id: uuid.UUID, quantity: int, position: int
    ) -> OrderItem:
        item = OrderItem(order_id=order_id, book_id=book_id, quantity=quantity, position=position)
        db.add(item)
        db.flush()
        return item

    @staticmethod
    # Get order with items, books and genres
    def get_with_details(
        db: Session, order_id: uuid.UUID, user_id: uuid.UUID | None = None
    ) -> Order | None:
        stmt = select(Order).where(Order.id == order_id)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        return db.scalars(_with_details(stmt)).first()

    @staticmethod
    # List a user's orders, newest first
    def list_for_user(db: Session, user_id: uuid.UUID) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.asc())
        )
        return list(db.scalars(_with_details(stmt)).all())

    @staticmethod
    def count(db: Session) -> int:
        return db.scalar(select(func.count()).select_from(Order)) or 0

    @staticmethod
    # Sum of quantity * price over every order item
    def total_amount(db: Session) -> Decimal:
        stmt = select(func.coalesce(func.sum(OrderItem.quantity * Book.price), 0)).join(
            Book, Book.id == OrderItem.book_id
        )
        return Decimal(str(db.scalar(stmt) or 0))

    @staticmethod
    # Quantity sold per genre: (genre_id, genre_name, quantity)
    def quantities_by_genre(db: Session) -> list[tuple[uuid.UUID, str, int]]:
        stmt = (
            select(Genre.id, Genre.name, func.sum(OrderItem.quantity))
            .join(Book, Book.id == OrderItem.book_id)
            .join(Genre, Genre.id == Book.genre_id)
            .group_by(Genre.id, Genre.name)
        )
        return [(row[0], row[1], int(row[2])) for row in db.execute(stmt).all()]
