from unittest.mock import patch

import pytest
from sqlalchemy import text

from bookswap.core.exceptions import (
    AlreadyReportedError,
    AlreadyReviewedError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from bookswap.models import PostingStatus, ReportStatus, ReportType
from bookswap.schemas.report import CommentTarget, OrderViolationTarget, PostingTarget
from bookswap.services.comment_service import CommentService
from bookswap.services.report_service import ReportService


@pytest.fixture
def report_service(db):
    return ReportService(db)


class TestSubmitReport:
    """신고 접수 테스트"""

    def test_posting_report_is_pending(self, report_service, make_user, make_posting):
        reporter = make_user()
        posting = make_posting(make_user())

        report = report_service.submit(reporter.id, PostingTarget(posting_id=posting.id), "  fake listing  ")

        assert report.status == ReportStatus.PENDING
        assert report.report_type == ReportType.POSTING
        assert report.posting_id == posting.id
        assert report.reason == "fake listing"
        assert report.reviewed_by is None

    def test_comment_report_keeps_posting_context(self, report_service, make_user, make_posting, make_comment):
        reporter = make_user()
        posting = make_posting(make_user())
        comment = make_comment(make_user(), posting)

        report = report_service.submit(reporter.id, CommentTarget(comment_id=comment.id), "spam")

        assert report.comment_id == comment.id
        assert report.posting_id == posting.id
        assert report.target_user_id == comment.author_id

    def test_duplicate_report_rejected(self, report_service, make_user, make_posting):
        reporter = make_user()
        posting = make_posting(make_user())
        report_service.submit(reporter.id, PostingTarget(posting_id=posting.id), "scam")

        with pytest.raises(AlreadyReportedError):
            report_service.submit(reporter.id, PostingTarget(posting_id=posting.id), "scam again")

    def test_other_reporters_may_report_same_target(self, report_service, make_user, make_posting):
        posting = make_posting(make_user())
        report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")
        report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        assert report_service.list_reports().total_count == 2

    def test_blank_reason_rejected(self, report_service, make_user, make_posting):
        posting = make_posting(make_user())
        with pytest.raises(ValidationError):
            report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "   ")

    def test_missing_target(self, report_service, make_user):
        with pytest.raises(NotFoundError):
            report_service.submit(make_user().id, PostingTarget(posting_id=404), "gone")

    def test_own_posting_is_invalid_target(self, report_service, make_user, make_posting):
        seller = make_user()
        posting = make_posting(seller)

        with pytest.raises(ValidationError) as exc_info:
            report_service.submit(seller.id, PostingTarget(posting_id=posting.id), "oops")

        assert exc_info.value.details["reason"] == "InvalidTarget"

    def test_order_violation_by_party(self, report_service, make_user, make_posting, make_order):
        buyer, seller = make_user(), make_user()
        order = make_order(buyer, seller, make_posting(seller))

        report = report_service.submit(
            buyer.id,
            OrderViolationTarget(order_id=order.id, target_user_id=seller.id),
            "book was damaged",
        )

        assert report.order_id == order.id
        assert report.target_user_id == seller.id
        assert report.posting_id is None

    def test_order_violation_by_outsider(self, report_service, make_user, make_posting, make_order):
        buyer, seller = make_user(), make_user()
        order = make_order(buyer, seller, make_posting(seller))

        with pytest.raises(AuthorizationError):
            report_service.submit(
                make_user().id,
                OrderViolationTarget(order_id=order.id, target_user_id=seller.id),
                "nosy",
            )

    @pytest.mark.parametrize("who", ["self", "stranger"])
    def test_order_violation_target_must_be_counterparty(
        self, report_service, make_user, make_posting, make_order, who
    ):
        buyer, seller, stranger = make_user(), make_user(), make_user()
        order = make_order(buyer, seller, make_posting(seller))
        target_user_id = buyer.id if who == "self" else stranger.id

        with pytest.raises(ValidationError) as exc_info:
            report_service.submit(
                buyer.id,
                OrderViolationTarget(order_id=order.id, target_user_id=target_user_id),
                "bad",
            )

        assert exc_info.value.details["reason"] == "InvalidTarget"


class TestReviewReport:
    """신고 처리 테스트"""

    def test_approve_removes_posting_and_counts_violation(self, db, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        seller = make_user()
        posting = make_posting(seller)
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        reviewed = report_service.review(
            report.id, admin.id, ReportStatus.APPROVED, cascade_remove_posting=True
        )

        assert reviewed.status == ReportStatus.APPROVED
        assert reviewed.reviewed_by == admin.id
        assert reviewed.reviewed_at is not None
        db.refresh(posting)
        db.refresh(seller)
        assert posting.status == PostingStatus.REMOVED.value
        assert seller.violation_count == 1

    def test_approve_without_cascade_keeps_posting(self, db, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        posting = make_posting(make_user())
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        report_service.review(report.id, admin.id, ReportStatus.APPROVED)

        db.refresh(posting)
        assert posting.status == PostingStatus.LISTED.value

    def test_reject_has_no_side_effects(self, db, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        seller = make_user()
        posting = make_posting(seller)
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "meh")

        reviewed = report_service.review(
            report.id, admin.id, ReportStatus.REJECTED, cascade_remove_posting=True
        )

        assert reviewed.status == ReportStatus.REJECTED
        db.refresh(posting)
        db.refresh(seller)
        assert posting.status == PostingStatus.LISTED.value
        assert seller.violation_count == 0

    def test_second_decision_rejected(self, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        posting = make_posting(make_user())
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")
        report_service.review(report.id, admin.id, ReportStatus.REJECTED)

        with pytest.raises(AlreadyReviewedError):
            report_service.review(report.id, admin.id, ReportStatus.APPROVED)

        assert report_service.get_report(report.id).status == ReportStatus.REJECTED

    def test_pending_is_not_a_decision(self, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        posting = make_posting(make_user())
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        with pytest.raises(ValidationError):
            report_service.review(report.id, admin.id, ReportStatus.PENDING)

    def test_non_admin_cannot_review(self, report_service, make_user, make_posting):
        posting = make_posting(make_user())
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        with pytest.raises(AuthorizationError):
            report_service.review(report.id, make_user().id, ReportStatus.APPROVED)

    def test_unknown_report(self, report_service, make_user):
        admin = make_user(is_admin=True)
        with pytest.raises(NotFoundError):
            report_service.review(999, admin.id, ReportStatus.APPROVED)

    def test_failed_cascade_keeps_decision_and_logs(self, db, report_service, make_user, make_posting):
        admin = make_user(is_admin=True)
        posting = make_posting(make_user())
        report = report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "scam")

        with patch.object(
            report_service.posting_repo,
            "compare_and_swap_status",
            side_effect=RuntimeError("posting table unavailable"),
        ), patch("bookswap.services.report_service.logger") as mock_logger:
            reviewed = report_service.review(
                report.id, admin.id, ReportStatus.APPROVED, cascade_remove_posting=True
            )

        assert reviewed.status == ReportStatus.APPROVED
        assert mock_logger.error.called
        assert "posting table unavailable" in mock_logger.error.call_args[0][0]
        db.refresh(posting)
        assert posting.status == PostingStatus.LISTED.value

    def test_order_violation_counts_against_target_user(
        self, db, report_service, make_user, make_posting, make_order
    ):
        admin = make_user(is_admin=True)
        buyer, seller = make_user(), make_user()
        order = make_order(buyer, seller, make_posting(seller))
        report = report_service.submit(
            seller.id, OrderViolationTarget(order_id=order.id, target_user_id=buyer.id), "no-show"
        )

        report_service.review(report.id, admin.id, ReportStatus.APPROVED)

        db.refresh(buyer)
        db.refresh(seller)
        assert buyer.violation_count == 1
        assert seller.violation_count == 0


class TestCommentReportAfterDeletion:
    """댓글이 삭제되어도 신고는 남아야 함"""

    def test_foreign_keys_are_enforced(self, db):
        assert db.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_pending_report_survives_comment_deletion(
        self, db, session_factory, make_user, make_posting, make_comment
    ):
        admin = make_user(is_admin=True)
        author = make_user()
        posting = make_posting(make_user())
        comment = make_comment(author, posting)
        report = ReportService(db).submit(make_user().id, CommentTarget(comment_id=comment.id), "abuse")

        CommentService(db).delete(comment.id, author.id)

        later = ReportService(session_factory())
        kept = later.get_report(report.id)
        assert kept.status == ReportStatus.PENDING
        assert kept.comment_id is None
        assert kept.posting_id == posting.id
        assert kept.target_user_id == author.id

        reviewed = later.review(report.id, admin.id, ReportStatus.APPROVED)

        assert reviewed.status == ReportStatus.APPROVED
        db.refresh(author)
        assert author.violation_count == 1

    def test_reviewed_report_keeps_audit_trail(
        self, db, session_factory, make_user, make_posting, make_comment
    ):
        admin = make_user(is_admin=True)
        author = make_user()
        comment = make_comment(author, make_posting(make_user()))
        service = ReportService(db)
        report = service.submit(make_user().id, CommentTarget(comment_id=comment.id), "abuse")
        service.review(report.id, admin.id, ReportStatus.REJECTED)

        CommentService(db).delete(comment.id, author.id)

        kept = ReportService(session_factory()).get_report(report.id)
        assert kept.status == ReportStatus.REJECTED
        assert kept.reviewed_by == admin.id
        assert kept.reviewed_at is not None


class TestReportQueries:
    def test_list_filters(self, report_service, make_user, make_posting, make_comment):
        reporter = make_user()
        posting = make_posting(make_user())
        comment = make_comment(make_user(), posting)
        report_service.submit(reporter.id, PostingTarget(posting_id=posting.id), "a")
        report_service.submit(reporter.id, CommentTarget(comment_id=comment.id), "b")
        report_service.submit(make_user().id, PostingTarget(posting_id=posting.id), "c")

        mine = report_service.list_my_reports(reporter.id)
        comments = report_service.list_reports(report_type=ReportType.COMMENT)
        pending = report_service.list_reports(status=ReportStatus.PENDING)

        assert mine.total_count == 2
        assert comments.total_count == 1
        assert pending.total_count == 3
