"""
Admin Router

관리자 전용 API 엔드포인트
- 사용자 조회 및 차단
- 게시물/신고 관리
- 카탈로그 관리
- 플랫폼 통계
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query, status

from bookswap.core.auth_middleware import require_admin
from bookswap.deps import (
    get_catalog_service,
    get_posting_service,
    get_report_service,
    get_statistics_service,
    get_user_service,
)
from bookswap.models.posting import PostingStatus
from bookswap.models.report import ReportStatus, ReportType
from bookswap.schemas.auth import BaseResponse
from bookswap.schemas.catalog import CategoryCreate, CategoryUpdate, CourseCreate, CourseUpdate
from bookswap.schemas.pagination import PaginationLimits, PaginationMeta
from bookswap.schemas.report import ReportReviewRequest
from bookswap.schemas.statistics import StatisticsType
from bookswap.schemas.user import BlockUserRequest, User as UserSchema
from bookswap.services.catalog_service import CatalogService
from bookswap.services.posting_service import PostingService
from bookswap.services.report_service import ReportService
from bookswap.services.statistics_service import StatisticsService
from bookswap.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin"])


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------


@router.get("/users", response_model=BaseResponse)
def list_users(
    is_admin: Optional[bool] = Query(None, alias="isAdmin"),
    is_blocked: Optional[bool] = Query(None, alias="isBlocked"),
    search: Optional[str] = Query(None, max_length=100, description="이름 또는 이메일"),
    limit: int = Query(
        PaginationLimits.USER_LIST["default"],
        ge=PaginationLimits.USER_LIST["min"],
        le=PaginationLimits.USER_LIST["max"],
    ),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """사용자 목록"""
    result = user_service.list_users(
        is_admin=is_admin, is_blocked=is_blocked, search=search, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/users/{user_id}", response_model=BaseResponse)
def get_user_detail(
    user_id: int,
    current_user: UserSchema = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """사용자 상세 (통계, 최근 게시물, 관련 신고 포함)"""
    detail = user_service.get_user_detail(user_id)
    return BaseResponse(success=True, data=detail.model_dump(mode="json"))


@router.put("/users/{user_id}", response_model=BaseResponse)
def set_user_blocked(
    user_id: int,
    request: BlockUserRequest,
    current_user: UserSchema = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> Any:
    """사용자 차단/해제"""
    user = user_service.set_blocked(current_user.id, user_id, request.is_blocked)
    return BaseResponse(
        success=True, data={"user_id": user.id, "is_blocked": user.is_blocked}
    )


# ----------------------------------------------------------------------
# Postings
# ----------------------------------------------------------------------


@router.get("/postings", response_model=BaseResponse)
def list_postings(
    posting_status: Optional[PostingStatus] = Query(None, alias="status"),
    keyword: Optional[str] = Query(None, max_length=100),
    limit: int = Query(
        PaginationLimits.POSTINGS["default"],
        ge=PaginationLimits.POSTINGS["min"],
        le=PaginationLimits.POSTINGS["max"],
    ),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(require_admin),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    """모든 상태의 게시물 목록"""
    result = posting_service.search(
        status=posting_status, keyword=keyword, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/postings/{posting_id}", response_model=BaseResponse)
def get_posting(
    posting_id: int,
    current_user: UserSchema = Depends(require_admin),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    posting = posting_service.get_posting(posting_id)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


@router.delete("/postings/{posting_id}", response_model=BaseResponse)
def remove_posting(
    posting_id: int,
    current_user: UserSchema = Depends(require_admin),
    posting_service: PostingService = Depends(get_posting_service),
) -> Any:
    """게시물 강제 삭제 (상태를 removed 로 변경)"""
    posting = posting_service.remove_as_admin(posting_id)
    return BaseResponse(success=True, data={"posting": posting.model_dump(mode="json")})


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------


@router.get("/reports", response_model=BaseResponse)
def list_reports(
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
    report_type: Optional[ReportType] = Query(None, alias="reportType"),
    limit: int = Query(
        PaginationLimits.REPORTS["default"],
        ge=PaginationLimits.REPORTS["min"],
        le=PaginationLimits.REPORTS["max"],
    ),
    offset: int = Query(0, ge=0),
    current_user: UserSchema = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    result = report_service.list_reports(
        report_type=report_type, status=report_status, limit=limit, offset=offset
    )
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta=PaginationMeta.build(limit, offset, result.total_count).model_dump(),
    )


@router.get("/reports/{report_id}", response_model=BaseResponse)
def get_report(
    report_id: int,
    current_user: UserSchema = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    report = report_service.get_report(report_id)
    return BaseResponse(success=True, data={"report": report.model_dump(mode="json")})


@router.put("/reports/{report_id}", response_model=BaseResponse)
def review_report(
    report_id: int,
    request: ReportReviewRequest,
    current_user: UserSchema = Depends(require_admin),
    report_service: ReportService = Depends(get_report_service),
) -> Any:
    """신고 승인/반려. 승인 시 게시물 삭제는 removePosting 으로 요청"""
    report = report_service.review(
        report_id,
        current_user.id,
        ReportStatus(request.status),
        cascade_remove_posting=request.remove_posting,
    )
    return BaseResponse(success=True, data={"report": report.model_dump(mode="json")})


# ----------------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------------


@router.get("/statistics", response_model=BaseResponse)
def get_statistics(
    statistics_type: StatisticsType = Query(StatisticsType.PLATFORM, alias="type"),
    current_user: UserSchema = Depends(require_admin),
    statistics_service: StatisticsService = Depends(get_statistics_service),
) -> Any:
    result = statistics_service.get(statistics_type)
    return BaseResponse(
        success=True,
        data=result.model_dump(mode="json"),
        meta={"type": statistics_type.value},
    )


# ----------------------------------------------------------------------
# Catalog
# ----------------------------------------------------------------------


@router.post("/categories", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    request: CategoryCreate,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    category = catalog_service.create_category(request)
    return BaseResponse(success=True, data={"category": category.model_dump()})


@router.put("/categories/{category_id}", response_model=BaseResponse)
def update_category(
    category_id: int,
    request: CategoryUpdate,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    category = catalog_service.update_category(category_id, request)
    return BaseResponse(success=True, data={"category": category.model_dump()})


@router.delete("/categories/{category_id}", response_model=BaseResponse)
def delete_category(
    category_id: int,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    catalog_service.delete_category(category_id)
    return BaseResponse(success=True, data={"deleted": True})


@router.post("/courses", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    request: CourseCreate,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    course = catalog_service.create_course(request)
    return BaseResponse(success=True, data={"course": course.model_dump()})


@router.put("/courses/{course_id}", response_model=BaseResponse)
def update_course(
    course_id: int,
    request: CourseUpdate,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    course = catalog_service.update_course(course_id, request)
    return BaseResponse(success=True, data={"course": course.model_dump()})


@router.delete("/courses/{course_id}", response_model=BaseResponse)
def delete_course(
    course_id: int,
    current_user: UserSchema = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    catalog_service.delete_course(course_id)
    return BaseResponse(success=True, data={"deleted": True})
