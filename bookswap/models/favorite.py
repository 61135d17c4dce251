"""
Favorite Postings Model

Junction table for many-to-many relationship between users and postings.
"""

from sqlalchemy import BigInteger, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.schema import PrimaryKeyConstraint

from bookswap.models.base import BaseModel


class FavoritePosting(BaseModel):
    """
    Postings a user has saved.

    Composite primary key ensures no duplicate favorites per user.
    """

    __tablename__ = "favorite_postings"
    __table_args__ = (
        PrimaryKeyConstraint("user_id", "posting_id", name="pk_favorite_postings"),
    )

    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Reference to user who saved the posting",
    )

    posting_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("postings.id", ondelete="CASCADE"),
        nullable=False,
        comment="Saved posting",
    )

    # created_at, updated_at inherited from BaseModel's TimestampMixin
