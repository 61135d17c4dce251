import logging
from typing import Optional, Union

from sqlalchemy.orm import Session

from bookswap.core.exceptions import (
    AlreadyReportedError,
    AlreadyReviewedError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from bookswap.database.session import unit_of_work
from bookswap.models.posting import PostingStatus
from bookswap.models.report import ReportStatus, ReportType
from bookswap.repositories.comment_repository import CommentRepository
from bookswap.repositories.order_repository import OrderRepository
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.repositories.report_repository import ReportRepository
from bookswap.repositories.user_repository import UserRepository
from bookswap.schemas.report import (
    CommentTarget,
    OrderViolationTarget,
    PostingTarget,
    ReportListResponse,
    ReportSchema,
)

logger = logging.getLogger(__name__)

Target = Union[PostingTarget, CommentTarget, OrderViolationTarget]

REMOVABLE_STATUSES = (
    PostingStatus.LISTED,
    PostingStatus.RESERVED,
    PostingStatus.SOLD,
    PostingStatus.REPORTED,
)


def _target_id(target: Target) -> int:
    if isinstance(target, PostingTarget):
        return target.posting_id
    if isinstance(target, CommentTarget):
        return target.comment_id
    return target.order_id


class ReportService:
    """신고 접수 및 관리자 처리 서비스"""

    def __init__(self, db: Session):
        self.db = db
        self.report_repo = ReportRepository(db)
        self.posting_repo = PostingRepository(db)
        self.comment_repo = CommentRepository(db)
        self.order_repo = OrderRepository(db)
        self.user_repo = UserRepository(db)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, reporter_id: int, target: Target, reason: str) -> ReportSchema:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required")

        report_type = ReportType(target.kind)
        target_id = _target_id(target)
        if self.report_repo.find_duplicate(reporter_id, report_type, target_id):
            raise AlreadyReportedError(
                details={"report_type": report_type.value, "target_id": target_id}
            )

        columns = self._resolve_target(reporter_id, target)

        with unit_of_work(self.db):
            report = self.report_repo.create(
                commit=False,
                reporter_id=reporter_id,
                report_type=report_type.value,
                reason=reason,
                status=ReportStatus.PENDING.value,
                **columns,
            )

        logger.info(
            f"User {reporter_id} reported {report_type.value} {target_id} (report {report.id})"
        )
        return report

    def _resolve_target(self, reporter_id: int, target: Target) -> dict:
        """Check the target exists and may be reported; return its report columns"""
        if isinstance(target, PostingTarget):
            posting = self.posting_repo.get_by_id(target.posting_id)
            if posting is None:
                raise NotFoundError("Posting not found", details={"posting_id": target.posting_id})
            if posting.seller_id == reporter_id:
                raise ValidationError(
                    "You cannot report your own posting", details={"reason": "InvalidTarget"}
                )
            return {"posting_id": posting.id}

        if isinstance(target, CommentTarget):
            comment = self.comment_repo.get_by_id(target.comment_id)
            if comment is None:
                raise NotFoundError("Comment not found", details={"comment_id": target.comment_id})
            if comment.author_id == reporter_id:
                raise ValidationError(
                    "You cannot report your own comment", details={"reason": "InvalidTarget"}
                )
            return {
                "comment_id": comment.id,
                "posting_id": comment.posting_id,
                "target_user_id": comment.author_id,
            }

        order = self.order_repo.get_by_id(target.order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": target.order_id})
        parties = (order.buyer_id, order.seller_id)
        if reporter_id not in parties:
            raise AuthorizationError("Only the buyer or seller can report this order")
        if target.target_user_id == reporter_id:
            raise ValidationError(
                "You cannot report yourself", details={"reason": "InvalidTarget"}
            )
        if target.target_user_id not in parties:
            raise ValidationError(
                "Reported user is not a party to this order",
                details={"reason": "InvalidTarget", "target_user_id": target.target_user_id},
            )
        return {"order_id": order.id, "target_user_id": target.target_user_id}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_my_reports(
        self,
        reporter_id: int,
        report_type: Optional[ReportType] = None,
        status: Optional[ReportStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReportListResponse:
        reports, total_count = self.report_repo.list_reports(
            reporter_id=reporter_id, report_type=report_type, status=status, limit=limit, offset=offset
        )
        return ReportListResponse(reports=reports, total_count=total_count)

    def list_reports(
        self,
        report_type: Optional[ReportType] = None,
        status: Optional[ReportStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReportListResponse:
        reports, total_count = self.report_repo.list_reports(
            report_type=report_type, status=status, limit=limit, offset=offset
        )
        return ReportListResponse(reports=reports, total_count=total_count)

    def get_report(self, report_id: int) -> ReportSchema:
        report = self.report_repo.get_by_id(report_id)
        if report is None:
            raise NotFoundError("Report not found", details={"report_id": report_id})
        return report

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------

    def review(
        self,
        report_id: int,
        reviewer_id: int,
        decision: ReportStatus,
        cascade_remove_posting: bool = False,
    ) -> ReportSchema:
        """Approve or reject a pending report (admins only).

        Raises:
            AuthorizationError: reviewer is not an admin
            ValidationError: decision is not approved/rejected
            NotFoundError: report does not exist
            AlreadyReviewedError: report was decided before
        """
        reviewer = self.user_repo.get_by_id(reviewer_id)
        if reviewer is None or not reviewer.is_admin:
            raise AuthorizationError("Admin access required")
        decision = ReportStatus(decision)
        if decision == ReportStatus.PENDING:
            raise ValidationError("Decision must be approved or rejected")

        report = self.get_report(report_id)

        with unit_of_work(self.db):
            if not self.report_repo.mark_reviewed(report_id, reviewer_id, decision):
                raise AlreadyReviewedError(details={"report_id": report_id})

        logger.info(f"Admin {reviewer_id} {decision.value} report {report_id}")

        if decision == ReportStatus.APPROVED:
            if report.report_type == ReportType.POSTING and cascade_remove_posting:
                self._cascade_remove_posting(report)
            self._cascade_record_violation(report)

        return self.get_report(report_id)

    def _reported_user_id(self, report: ReportSchema) -> Optional[int]:
        if report.report_type in (ReportType.ORDER_VIOLATION, ReportType.COMMENT):
            return report.target_user_id
        if report.report_type == ReportType.POSTING and report.posting_id is not None:
            posting = self.posting_repo.get_by_id(report.posting_id)
            return posting.seller_id if posting else None
        return None

    def _cascade_remove_posting(self, report: ReportSchema) -> None:
        # best-effort: the approval above is already committed
        try:
            with unit_of_work(self.db):
                removed = self.posting_repo.compare_and_swap_status(
                    report.posting_id,
                    expected=REMOVABLE_STATUSES,
                    new_status=PostingStatus.REMOVED,
                )
            if removed:
                logger.info(f"Posting {report.posting_id} removed after report {report.id}")
            else:
                logger.warning(
                    f"Posting {report.posting_id} was not removable after report {report.id}"
                )
        except Exception as e:
            logger.error(f"Failed to remove posting {report.posting_id} for report {report.id}: {e}")

    def _cascade_record_violation(self, report: ReportSchema) -> None:
        try:
            user_id = self._reported_user_id(report)
            if user_id is None:
                logger.warning(f"No reported user resolved for report {report.id}")
                return
            with unit_of_work(self.db):
                self.user_repo.increment_violation_count(user_id)
        except Exception as e:
            logger.error(f"Failed to record violation for report {report.id}: {e}")
