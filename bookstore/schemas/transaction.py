from pydantic import BaseModel, ConfigDict, Field
import uuid
from datetime import datetime
from typing import Any, ClassVar

from bookstore.schemas.genre import GenreBrief


# Checkout line item; quantity is checked by the checkout service so that
# an unknown book is reported before a bad quantity
class TransactionItemCreate(BaseModel):
    book_id: str
    # left uncoerced; "2" or true is not a quantity
    quantity: Any = None

# Checkout request
class TransactionCreate(BaseModel):
    items: list[TransactionItemCreate] = Field(min_length=1)

# Checkout result
class TransactionCreated(BaseModel):
    transaction_id: uuid.UUID
    total_quantity: int
    total_price: int


class OrderBookRead(BaseModel):
    id: uuid.UUID
    title: str
    writer: str
    publisher: str
    price: float
    genre: GenreBrief | None = None
    deleted_at: datetime | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


class OrderItemRead(BaseModel):
    id: uuid.UUID
    book_id: uuid.UUID
    quantity: int
    book: OrderBookRead

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


class OrderUserRead(BaseModel):
    id: uuid.UUID
    username: str | None
    email: str

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


# Order read (history)
class OrderRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    user: OrderUserRead
    items: list[OrderItemRead] = []
    total_quantity: int
    total_price: int


class TransactionStatistics(BaseModel):
    total_transactions: int
    average_amount: int
    top_genre: str | None
    least_genre: str | None
