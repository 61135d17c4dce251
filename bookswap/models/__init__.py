# Model registry - importing this package registers every table on Base.metadata

from .base import Base, BaseModel
from .user import User
from .catalog import Category, Department, Course
from .posting import Posting, PostingImage, PostingStatus
from .comment import Comment
from .favorite import FavoritePosting
from .message import Message
from .order import Order, OrderStatus
from .transaction_record import TransactionRecord, TransactionType
from .report import Report, ReportStatus, ReportType
from .review import Review

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "Category",
    "Department",
    "Course",
    "Posting",
    "PostingImage",
    "PostingStatus",
    "Comment",
    "FavoritePosting",
    "Message",
    "Order",
    "OrderStatus",
    "TransactionRecord",
    "TransactionType",
    "Report",
    "ReportStatus",
    "ReportType",
    "Review",
]
