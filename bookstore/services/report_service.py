from decimal import Decimal
from sqlalchemy.orm import Session

from bookstore.repos.order_repo import OrderRepository
from bookstore.schemas.transaction import TransactionStatistics
from bookstore.utils.money import round_half_up


class ReportService:
    @staticmethod
    def transaction_statistics(db: Session) -> TransactionStatistics:
        """
        Aggregate every historical order.

        Genre ranking uses quantity sold; equal quantities are broken by
        genre name, then genre id, for both the top and the least genre.
        """
        total_transactions = OrderRepository.count(db)
        total_amount = OrderRepository.total_amount(db)
        average_amount = (
            round_half_up(total_amount / Decimal(total_transactions)) if total_transactions else 0
        )

        per_genre = OrderRepository.quantities_by_genre(db)
        top_genre: str | None = None
        least_genre: str | None = None
        if per_genre:
            top_genre = min(per_genre, key=lambda row: (-row[2], row[1], str(row[0])))[1]
            least_genre = min(per_genre, key=lambda row: (row[2], row[1], str(row[0])))[1]

        return TransactionStatistics(
            total_transactions=total_transactions,
            average_amount=average_amount,
            top_genre=top_genre,
            least_genre=least_genre,
        )
