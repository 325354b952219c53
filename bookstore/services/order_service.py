from __future__ import annotations
import uuid
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.core.errors import (
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
)
from bookstore.core.logging import get_logger
from bookstore.models.order import Order
from bookstore.repos.book_repo import BookRepository
from bookstore.repos.order_repo import OrderRepository
from bookstore.schemas.transaction import (
    OrderItemRead,
    OrderRead,
    OrderUserRead,
    TransactionCreate,
    TransactionCreated,
)
from bookstore.utils.money import round_half_up

logger = get_logger(__name__)


def _parse_book_id(raw: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


def _positive_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    return None


def order_totals(order: Order) -> tuple[int, int]:
    """(total_quantity, total_price) using the current book prices."""
    total_quantity = sum(item.quantity for item in order.items)
    total_price = sum(
        (Decimal(str(item.book.price)) * item.quantity for item in order.items),
        Decimal(0),
    )
    return total_quantity, round_half_up(total_price)


def to_order_read(order: Order) -> OrderRead:
    total_quantity, total_price = order_totals(order)
    return OrderRead(
        id=order.id,
        user_id=order.user_id,
        created_at=order.created_at,
        user=OrderUserRead.model_validate(order.user),
        items=[OrderItemRead.model_validate(item) for item in order.items],
        total_quantity=total_quantity,
        total_price=total_price,
    )


class OrderService:
    @staticmethod
    def create_transaction(
        db: Session, user_id: uuid.UUID, data: TransactionCreate
    ) -> TransactionCreated:
        """
        Checkout: validate every line against current stock, then create the
        order, its items and the stock decrements in one atomic unit.
        """
        # Pre-validation: one batch lookup, then every line in input order
        parsed_ids = [_parse_book_id(item.book_id) for item in data.items]
        books = BookRepository.map_active_by_ids(db, [i for i in parsed_ids if i is not None])

        lines: list[tuple[uuid.UUID, int]] = []
        for item, book_id in zip(data.items, parsed_ids):
            book = books.get(book_id) if book_id is not None else None
            if book is None:
                raise NotFoundError(f"Book not found: {item.book_id}", details={"book_id": item.book_id})

            quantity = _positive_int(item.quantity)
            if quantity is None:
                raise InvalidInputError(
                    f"Invalid quantity for book {item.book_id}",
                    details={"book_id": item.book_id, "quantity": item.quantity},
                )

            if quantity > book.stock_quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for book {book.id}",
                    details={
                        "book_id": str(book.id),
                        "requested": quantity,
                        "available": book.stock_quantity,
                    },
                )
            lines.append((book.id, quantity))

        # Atomic commit: order, items and conditional decrements together
        try:
            order_id = OrderRepository.create(db, user_id).id
            for position, (book_id, quantity) in enumerate(lines):
                _ = OrderRepository.add_item(db, order_id, book_id, quantity, position)
                if not BookRepository.try_decrement_stock(db, book_id, quantity):
                    available = BookRepository.get_stock(db, book_id) or 0
                    raise InsufficientStockError(
                        f"Insufficient stock for book {book_id}",
                        details={
                            "book_id": str(book_id),
                            "requested": quantity,
                            "available": available,
                        },
                    )
            db.commit()
        except InsufficientStockError:
            db.rollback()
            logger.warning("Checkout rolled back: stock changed during commit")
            raise
        except IntegrityError as e:
            db.rollback()
            raise InvalidInputError("Data integrity violation") from e
        except Exception:
            db.rollback()
            raise

        db.expire_all()
        committed = OrderRepository.get_with_details(db, order_id)
        if committed is None:
            raise RuntimeError(f"order {order_id} missing after commit")

        total_quantity, total_price = order_totals(committed)
        logger.info(
            "Transaction %s created: %d item(s), quantity=%d, price=%d",
            committed.id,
            len(committed.items),
            total_quantity,
            total_price,
        )
        return TransactionCreated(
            transaction_id=committed.id,
            total_quantity=total_quantity,
            total_price=total_price,
        )

    @staticmethod
    # User's order history, newest first
    def list_transactions(db: Session, user_id: uuid.UUID) -> list[OrderRead]:
        return [to_order_read(order) for order in OrderRepository.list_for_user(db, user_id)]

    @staticmethod
    def get_transaction(db: Session, user_id: uuid.UUID, order_id: uuid.UUID) -> OrderRead:
        order = OrderRepository.get_with_details(db, order_id, user_id=user_id)
        if order is None:
            raise NotFoundError("Transaction not found")
        return to_order_read(order)
