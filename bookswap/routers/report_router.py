from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status

from bookswap.core.auth_middleware import get_current_active_user
from bookswap.deps import get_report_service
from bookswap.models.report import ReportStatus, ReportType
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.report import ReportCreateRequest
from bookswap.schemas.user import User as UserSchema
from bookswap.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

_LIMITS = PaginationLimits.REPORTS


@router.post("", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def submit_report(
    request: ReportCreateRequest,
    current_user: UserSchema = Depends(get_current_active_user),
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    """게시물/댓글/거래 위반 신고"""
    report = report_service.submit(current_user.id, request.to_target(), request.reason)
    return BaseResponse(success=True, data={"report": report.model_dump(mode="json")})


@router.get("", response_model=BaseResponse)
def list_my_reports(
    report_type: Optional[ReportType] = Query(None, alias="reportType"),
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
    limit: int = Query(_LIMITS["default"], ge=_LIMITS["min"], le=_LIMITS["max"]),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(get_current_active_user),
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    result = report_service.list_my_reports(
        current_user.id, report_type=report_type, status=report_status, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )
