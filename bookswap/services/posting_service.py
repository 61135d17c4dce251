import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from bookswap.config import Settings
from bookswap.core.exceptions import (
    AuthorizationError,
    ListingUnavailableError,
    NotFoundError,
    ValidationError,
)
from bookswap.database.session import unit_of_work
from bookswap.models.posting import PostingStatus
from bookswap.repositories.catalog_repository import CategoryRepository, CourseRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.schemas.posting import (
    PopularPosting,
    PostingCreate,
    PostingDetail,
    PostingImageCreate,
    PostingImageSchema,
    PostingSchema,
    PostingSearchResult,
    PostingUpdate,
)

logger = logging.getLogger(__name__)

# Owners may only toggle between these two
OWNER_SETTABLE_STATUSES = (PostingStatus.LISTED, PostingStatus.RESERVED)
REMOVABLE_STATUSES = (
    PostingStatus.LISTED,
    PostingStatus.RESERVED,
    PostingStatus.SOLD,
    PostingStatus.REPORTED,
)
EDITABLE_STATUSES = (PostingStatus.LISTED, PostingStatus.RESERVED, PostingStatus.REPORTED)
NULLABLE_FIELDS = ("description", "category_id", "course_id", "image_url")


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Title cannot be empty")
    return title


class PostingService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings
        self.posting_repo = PostingRepository(db)
        self.category_repo = CategoryRepository(db)
        self.course_repo = CourseRepository(db)

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if not limit:
            return self.settings.DEFAULT_PAGE_SIZE
        return min(limit, self.settings.MAX_PAGE_SIZE)

    def _get_owned(self, posting_id: int, user_id: int) -> PostingSchema:
        posting = self.posting_repo.get_by_id(posting_id)
        if posting is None:
            raise NotFoundError("Posting not found", details={"posting_id": posting_id})
        if posting.seller_id != user_id:
            raise AuthorizationError("Only the seller can modify this posting")
        return posting

    def _validate_catalog(self, category_id: Optional[int], course_id: Optional[int]) -> None:
        if category_id is not None and not self.category_repo.exists({"id": category_id}):
            raise ValidationError("Unknown category", details={"category_id": category_id})
        if course_id is not None and not self.course_repo.exists({"id": course_id}):
            raise ValidationError("Unknown course", details={"course_id": course_id})

    def search(
        self,
        status: Optional[PostingStatus] = PostingStatus.LISTED,
        category_id: Optional[int] = None,
        course_id: Optional[int] = None,
        keyword: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> PostingSearchResult:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationError("min_price cannot exceed max_price")
        postings, total_count = self.posting_repo.search(
            status=status,
            category_id=category_id,
            course_id=course_id,
            keyword=keyword,
            min_price=min_price,
            max_price=max_price,
            limit=self._clamp_limit(limit),
            offset=offset,
        )
        return PostingSearchResult(postings=postings, total_count=total_count)

    def get_posting(self, posting_id: int) -> PostingDetail:
        detail = self.posting_repo.get_detail(posting_id)
        if detail is None:
            raise NotFoundError("Posting not found", details={"posting_id": posting_id})
        return detail

    def list_user_postings(
        self,
        user_id: int,
        status: Optional[PostingStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> PostingSearchResult:
        postings, total_count = self.posting_repo.search(
            status=status, seller_id=user_id, limit=self._clamp_limit(limit), offset=offset
        )
        return PostingSearchResult(postings=postings, total_count=total_count)

    def popular(self, limit: Optional[int] = None) -> List[PopularPosting]:
        return self.posting_repo.popular(limit or self.settings.POPULAR_POSTINGS_LIMIT)

    def create(self, seller_id: int, data: PostingCreate) -> PostingDetail:
        self._validate_catalog(data.category_id, data.course_id)
        with unit_of_work(self.db):
            posting = self.posting_repo.create(
                commit=False,
                seller_id=seller_id,
                title=_clean_title(data.title),
                description=data.description,
                price=data.price,
                status=PostingStatus.LISTED.value,
                category_id=data.category_id,
                course_id=data.course_id,
                image_url=data.image_url,
                version=1,
            )
            for order, image_url in enumerate(data.images):
                self.posting_repo.add_image(posting.id, image_url, order, commit=False)

        logger.info(f"User {seller_id} created posting {posting.id}")
        return self.get_posting(posting.id)

    def update(self, posting_id: int, user_id: int, data: PostingUpdate) -> PostingSchema:
        """판매자 수정 (판매완료/삭제된 게시물은 수정 불가)"""
        self._get_owned(posting_id, user_id)

        fields = {
            key: value
            for key, value in data.model_dump(exclude_unset=True, exclude={"status"}).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        if "title" in fields:
            fields["title"] = _clean_title(fields["title"])
        self._validate_catalog(fields.get("category_id"), fields.get("course_id"))

        with unit_of_work(self.db):
            posting = self.posting_repo.get_for_update(posting_id)
            if PostingStatus.is_terminal(posting.status.value):
                raise ListingUnavailableError(
                    "Sold or removed postings cannot be edited",
                    details={"posting_id": posting_id, "status": posting.status.value},
                )
            if data.status is not None and data.status != posting.status:
                if data.status not in OWNER_SETTABLE_STATUSES or posting.status not in OWNER_SETTABLE_STATUSES:
                    raise ValidationError(
                        "Status can only be switched between listed and reserved",
                        details={"from": posting.status.value, "to": data.status.value},
                    )
                if not self.posting_repo.compare_and_swap_status(
                    posting_id, expected=[posting.status], new_status=data.status
                ):
                    raise ListingUnavailableError(details={"posting_id": posting_id})
            if fields and not self.posting_repo.update_fields(
                posting_id, expected=EDITABLE_STATUSES, **fields
            ):
                raise ListingUnavailableError(
                    "Sold or removed postings cannot be edited",
                    details={"posting_id": posting_id},
                )

        return self.posting_repo.get_by_id(posting_id)

    def _remove(self, posting_id: int) -> PostingSchema:
        with unit_of_work(self.db):
            if not self.posting_repo.compare_and_swap_status(
                posting_id, expected=REMOVABLE_STATUSES, new_status=PostingStatus.REMOVED
            ):
                raise ListingUnavailableError(
                    "Posting is already removed", details={"posting_id": posting_id}
                )
        return self.posting_repo.get_by_id(posting_id)

    def remove(self, posting_id: int, user_id: int) -> PostingSchema:
        """Owner withdrawal"""
        self._get_owned(posting_id, user_id)
        removed = self._remove(posting_id)
        logger.info(f"User {user_id} removed posting {posting_id}")
        return removed

    def remove_as_admin(self, posting_id: int) -> PostingSchema:
        if self.posting_repo.get_by_id(posting_id) is None:
            raise NotFoundError("Posting not found", details={"posting_id": posting_id})
        removed = self._remove(posting_id)
        logger.info(f"Posting {posting_id} removed by moderation")
        return removed

    # Images

    def list_images(self, posting_id: int) -> List[PostingImageSchema]:
        if self.posting_repo.get_by_id(posting_id) is None:
            raise NotFoundError("Posting not found", details={"posting_id": posting_id})
        return self.posting_repo.list_images(posting_id)

    def add_image(self, posting_id: int, user_id: int, data: PostingImageCreate) -> PostingImageSchema:
        self._get_owned(posting_id, user_id)
        return self.posting_repo.add_image(posting_id, data.image_url, data.display_order)

    def delete_image(self, posting_id: int, image_id: int, user_id: int) -> None:
        self._get_owned(posting_id, user_id)
        image = self.posting_repo.get_image(image_id)
        if image is None or image.posting_id != posting_id:
            raise NotFoundError("Image not found", details={"image_id": image_id})
        self.posting_repo.delete_image(image_id)
