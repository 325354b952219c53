from fastapi import APIRouter, Path
from typing import Annotated
import uuid
from starlette.status import HTTP_201_CREATED

from bookstore.api.deps import CurrentIdentity, DbSession
from bookstore.schemas.common import Envelope
from bookstore.schemas.transaction import (
    OrderRead,
    TransactionCreate,
    TransactionCreated,
    TransactionStatistics,
)
from bookstore.services.order_service import OrderService
from bookstore.services.report_service import ReportService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=Envelope[TransactionCreated], status_code=HTTP_201_CREATED)
def create_transaction(data: TransactionCreate, db: DbSession, identity: CurrentIdentity):
    result = OrderService.create_transaction(db, identity.user_id, data)
    return Envelope[TransactionCreated](message="Transaction created successfully", data=result)


@router.get("", response_model=Envelope[list[OrderRead]])
def list_transactions(db: DbSession, identity: CurrentIdentity):
    orders = OrderService.list_transactions(db, identity.user_id)
    return Envelope[list[OrderRead]](message="Success get all transactions", data=orders)


@router.get("/statistics", response_model=Envelope[TransactionStatistics])
def transaction_statistics(db: DbSession):
    stats = ReportService.transaction_statistics(db)
    return Envelope[TransactionStatistics](message="Success get transaction statistics", data=stats)


@router.get("/{transaction_id}", response_model=Envelope[OrderRead])
def get_transaction(
    db: DbSession,
    identity: CurrentIdentity,
    transaction_id: Annotated[uuid.UUID, Path(..., description="Transaction (order) ID")],
):
    order = OrderService.get_transaction(db, identity.user_id, transaction_id)
    return Envelope[OrderRead](message="Success get transaction detail", data=order)
