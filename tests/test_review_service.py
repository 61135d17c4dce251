import pytest

from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    DuplicateReviewError,
    NotFoundError,
    ValidationError,
)
from bookswap.models import OrderStatus
from bookswap.services.review_service import ReviewService


@pytest.fixture
def review_service(db):
    return ReviewService(db)


@pytest.fixture
def completed_order(make_user, make_posting, make_order):
    buyer, seller = make_user(), make_user()
    return make_order(buyer, seller, make_posting(seller)), buyer, seller


class TestSubmitReview:
    """리뷰 작성 테스트"""

    def test_buyer_reviews_seller(self, review_service, completed_order):
        order, buyer, seller = completed_order

        review = review_service.submit(buyer.id, order.id, 5, "  Great condition  ")

        assert review.target_id == seller.id
        assert review.reviewer_id == buyer.id
        assert review.rating == 5
        assert review.comment == "Great condition"

    @pytest.mark.parametrize("rating", [0, 6, -1, True, 4.5])
    def test_rating_out_of_range(self, review_service, completed_order, rating):
        order, buyer, _ = completed_order

        with pytest.raises(ValidationError) as exc_info:
            review_service.submit(buyer.id, order.id, rating)

        assert exc_info.value.details["reason"] == "InvalidRating"

    def test_only_buyer_may_review(self, review_service, completed_order):
        order, _, seller = completed_order

        with pytest.raises(AuthorizationError):
            review_service.submit(seller.id, order.id, 4)

    def test_one_review_per_order(self, review_service, completed_order):
        order, buyer, _ = completed_order
        review_service.submit(buyer.id, order.id, 4)

        with pytest.raises(DuplicateReviewError):
            review_service.submit(buyer.id, order.id, 2)

    def test_unique_constraint_backstop(self, review_service, completed_order, monkeypatch):
        order, buyer, _ = completed_order
        review_service.submit(buyer.id, order.id, 4)
        # pretend the pre-check raced with another insert
        monkeypatch.setattr(review_service.review_repo, "get_for_order", lambda order_id: None)

        with pytest.raises(DuplicateReviewError):
            review_service.submit(buyer.id, order.id, 3)

    def test_cancelled_order_not_reviewable(self, review_service, make_user, make_posting, make_order):
        buyer, seller = make_user(), make_user()
        order = make_order(buyer, seller, make_posting(seller), status=OrderStatus.CANCELLED)

        with pytest.raises(BusinessLogicError) as exc_info:
            review_service.submit(buyer.id, order.id, 3)

        assert exc_info.value.error_code == "REVIEW_ORDER_NOT_COMPLETED"

    def test_missing_order(self, review_service, make_user):
        with pytest.raises(NotFoundError):
            review_service.submit(make_user().id, 404, 3)


class TestReviewQueries:
    """리뷰 조회/수정 테스트"""

    def test_average_rating_rounds_to_one_decimal(
        self, review_service, make_user, make_posting, make_order
    ):
        seller = make_user()
        for rating in (5, 4, 4):
            buyer = make_user()
            order = make_order(buyer, seller, make_posting(seller))
            review_service.submit(buyer.id, order.id, rating)

        average = review_service.average_rating(seller.id)

        assert average.average == 4.3
        assert average.count == 3

    def test_average_without_reviews(self, review_service, make_user):
        average = review_service.average_rating(make_user().id)
        assert average.average == 0.0
        assert average.count == 0

    def test_author_updates_and_deletes(self, review_service, completed_order):
        order, buyer, _ = completed_order
        review = review_service.submit(buyer.id, order.id, 2)

        updated = review_service.update(review.id, buyer.id, rating=3, comment="Seller replied fast")
        assert updated.rating == 3
        assert updated.comment == "Seller replied fast"

        review_service.delete(review.id, buyer.id)
        assert review_service.get_for_order(order.id) is None

    def test_others_cannot_modify(self, review_service, completed_order):
        order, buyer, seller = completed_order
        review = review_service.submit(buyer.id, order.id, 2)

        with pytest.raises(AuthorizationError):
            review_service.update(review.id, seller.id, rating=5)
        with pytest.raises(AuthorizationError):
            review_service.delete(review.id, seller.id)

    def test_list_for_seller_and_reviewer(self, review_service, completed_order):
        order, buyer, seller = completed_order
        review_service.submit(buyer.id, order.id, 5)

        assert review_service.list_for_seller(seller.id).total_count == 1
        assert review_service.list_by_reviewer(buyer.id).total_count == 1
        assert review_service.list_for_seller(buyer.id).total_count == 0
