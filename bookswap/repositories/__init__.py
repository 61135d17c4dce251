# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .user_repository import UserRepository
from .transaction_repository import TransactionRepository
from .posting_repository import PostingRepository
from .catalog_repository import CategoryRepository, CourseRepository, DepartmentRepository
from .comment_repository import CommentRepository
from .favorites_repository import FavoritesRepository
from .message_repository import MessageRepository
from .order_repository import OrderRepository
from .report_repository import ReportRepository
from .review_repository import ReviewRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TransactionRepository",
    "PostingRepository",
    "CategoryRepository",
    "CourseRepository",
    "DepartmentRepository",
    "CommentRepository",
    "FavoritesRepository",
    "MessageRepository",
    "OrderRepository",
    "ReportRepository",
    "ReviewRepository",
]
