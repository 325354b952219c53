from .genre_repo import GenreRepository
from .book_repo import BookRepository
from .order_repo import OrderRepository
from .user_repo import UserRepository

__all__ = ["GenreRepository", "BookRepository", "OrderRepository", "UserRepository"]
