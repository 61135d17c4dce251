from unittest.mock import patch

import pytest

from bookswap.config import settings
from bookswap.core.exceptions import (
    AuthorizationError,
    ListingUnavailableError,
    NotFoundError,
    ValidationError,
)
from bookswap.models import Category, PostingStatus
from bookswap.schemas.posting import PostingCreate, PostingImageCreate, PostingUpdate
from bookswap.services.posting_service import PostingService


@pytest.fixture
def posting_service(db):
    return PostingService(db, settings)


class TestPostingLifecycle:
    """게시물 생성/수정/삭제 테스트"""

    def test_create_with_images(self, posting_service, make_user):
        seller = make_user()

        detail = posting_service.create(
            seller.id,
            PostingCreate(
                title="  Principles of Economics ",
                price=450,
                images=["https://img.example.com/a.jpg", "https://img.example.com/b.jpg"],
            ),
        )

        assert detail.title == "Principles of Economics"
        assert detail.status == PostingStatus.LISTED
        assert detail.version == 1
        assert [i.display_order for i in detail.images] == [0, 1]

    def test_create_with_unknown_category(self, posting_service, make_user):
        with pytest.raises(ValidationError):
            posting_service.create(make_user().id, PostingCreate(title="Book", price=10, categoryId=77))

    def test_create_with_known_category(self, db, posting_service, make_user):
        category = Category(name="Textbooks")
        db.add(category)
        db.commit()

        detail = posting_service.create(
            make_user().id, PostingCreate(title="Book", price=10, categoryId=category.id)
        )

        assert detail.category_id == category.id

    def test_owner_toggles_reserved(self, posting_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller)

        updated = posting_service.update(posting.id, seller.id, PostingUpdate(status=PostingStatus.RESERVED))

        assert updated.status == PostingStatus.RESERVED
        assert updated.version == 2

    def test_owner_cannot_mark_sold(self, posting_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller)

        with pytest.raises(ValidationError):
            posting_service.update(posting.id, seller.id, PostingUpdate(status=PostingStatus.SOLD))

    def test_sold_posting_is_frozen(self, posting_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller, status=PostingStatus.SOLD)

        with pytest.raises(ListingUnavailableError):
            posting_service.update(posting.id, seller.id, PostingUpdate(price=1))

    def test_edit_loses_to_concurrent_sale(self, db, posting_service, make_user, make_posting):
        """수정 직전에 판매된 게시물은 필드가 바뀌지 않아야 함"""
        seller = make_user()
        posting = make_posting(seller, price=300, title="Linear Algebra")
        snapshot = posting_service.posting_repo.get_by_id(posting.id)
        posting.status = PostingStatus.SOLD.value
        db.commit()

        with patch.object(posting_service.posting_repo, "get_for_update", return_value=snapshot):
            with pytest.raises(ListingUnavailableError):
                posting_service.update(
                    posting.id, seller.id, PostingUpdate(title="Cheap now", price=1)
                )

        db.refresh(posting)
        assert posting.status == PostingStatus.SOLD.value
        assert posting.title == "Linear Algebra"
        assert posting.price == 300

    def test_edit_by_stranger(self, posting_service, make_user, make_posting):
        posting = make_posting(make_user())
        with pytest.raises(AuthorizationError):
            posting_service.update(posting.id, make_user().id, PostingUpdate(price=1))

    def test_remove_twice(self, posting_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller)

        assert posting_service.remove(posting.id, seller.id).status == PostingStatus.REMOVED
        with pytest.raises(ListingUnavailableError):
            posting_service.remove(posting.id, seller.id)

    def test_admin_removal_of_missing_posting(self, posting_service):
        with pytest.raises(NotFoundError):
            posting_service.remove_as_admin(4242)


class TestPostingQueries:
    def test_search_defaults_to_listed(self, posting_service, make_user, make_posting):
        seller = make_user()
        make_posting(seller, title="Listed one")
        make_posting(seller, title="Sold one", status=PostingStatus.SOLD)

        result = posting_service.search()
        everything = posting_service.search(status=None)
        mine = posting_service.list_user_postings(seller.id)

        assert [p.title for p in result.postings] == ["Listed one"]
        assert everything.total_count == 2
        assert mine.total_count == 2

    def test_detail_includes_seller(self, posting_service, make_user, make_posting):
        seller = make_user(username="bookworm")
        posting = make_posting(seller)

        detail = posting_service.get_posting(posting.id)

        assert detail.seller.username == "bookworm"

    def test_images_owned_by_seller(self, posting_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller)

        image = posting_service.add_image(
            posting.id, seller.id, PostingImageCreate(imageUrl="https://img.example.com/c.jpg")
        )
        assert len(posting_service.list_images(posting.id)) == 1

        with pytest.raises(AuthorizationError):
            posting_service.delete_image(posting.id, image.id, make_user().id)
        posting_service.delete_image(posting.id, image.id, seller.id)
        assert posting_service.list_images(posting.id) == []
