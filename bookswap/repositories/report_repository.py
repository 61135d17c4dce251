from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from bookswap.models.posting import Posting
from bookswap.models.report import Report, ReportStatus, ReportType
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.report import ReportSchema


class ReportRepository(BaseRepository[Report, ReportSchema]):
    def __init__(self, db: Session):
        super().__init__(Report, ReportSchema, db)

    def find_duplicate(
        self, reporter_id: int, report_type: ReportType, target_id: int
    ) -> Optional[ReportSchema]:
        """Existing report by the same reporter against the same target"""
        self._ensure_clean_session()
        target_column = {
            ReportType.POSTING: Report.posting_id,
            ReportType.COMMENT: Report.comment_id,
            ReportType.ORDER_VIOLATION: Report.order_id,
        }[report_type]
        instance = (
            self.db.query(Report)
            .filter(
                Report.reporter_id == reporter_id,
                Report.report_type == report_type.value,
                target_column == target_id,
            )
            .first()
        )
        return self._to_schema(instance)

    def list_reports(
        self,
        reporter_id: Optional[int] = None,
        report_type: Optional[ReportType] = None,
        status: Optional[ReportStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ReportSchema], int]:
        self._ensure_clean_session()
        query = self.db.query(Report)
        if reporter_id is not None:
            query = query.filter(Report.reporter_id == reporter_id)
        if report_type is not None:
            query = query.filter(Report.report_type == report_type.value)
        if status is not None:
            query = query.filter(Report.status == status.value)
        query = query.order_by(Report.created_at.desc(), Report.id.desc())
        return self._paginate(query, limit, offset)

    def list_concerning_user(self, user_id: int, limit: int = 20) -> List[ReportSchema]:
        """Reports whose target belongs to the user"""
        owned_postings = select(Posting.id).where(Posting.seller_id == user_id)
        instances = (
            self.db.query(Report)
            .filter(
                or_(
                    Report.target_user_id == user_id,
                    (Report.report_type == ReportType.POSTING.value)
                    & Report.posting_id.in_(owned_postings),
                )
            )
            .order_by(Report.id.desc())
            .limit(limit)
            .all()
        )
        return self._to_schemas(instances)

    def mark_reviewed(
        self, report_id: int, reviewer_id: int, decision: ReportStatus
    ) -> bool:
        """pending → decision. False if the report was already decided. Does not commit."""
        result = self.db.execute(
            update(Report)
            .where(Report.id == report_id, Report.status == ReportStatus.PENDING.value)
            .values(
                status=decision.value,
                reviewed_by=reviewer_id,
                reviewed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        self.db.query(Report).filter(Report.id == report_id).populate_existing().first()
        return True
