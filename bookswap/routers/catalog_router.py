from typing import Any, Optional
from fastapi import APIRouter, Depends, Query

from bookswap.deps import get_catalog_service
from bookswap.schemas.auth import BaseResponse
from bookswap.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


@router.get("/categories", response_model=BaseResponse)
def list_categories(catalog_service: CatalogService = Depends(get_catalog_service)) -> Any:
    categories = catalog_service.list_categories()
    return BaseResponse(success=True, data={"categories": [c.model_dump() for c in categories]})


@router.get("/departments", response_model=BaseResponse)
def list_departments(catalog_service: CatalogService = Depends(get_catalog_service)) -> Any:
    departments = catalog_service.list_departments()
    return BaseResponse(success=True, data={"departments": [d.model_dump() for d in departments]})


@router.get("/courses", response_model=BaseResponse)
def list_courses(
    department_id: Optional[int] = Query(None, alias="departmentId"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    keyword: Optional[str] = Query(None, max_length=100),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Any:
    """학과/분류/키워드로 과목 검색"""
    courses = catalog_service.list_courses(
        department_id=department_id, category_id=category_id, keyword=keyword
    )
    return BaseResponse(success=True, data={"courses": [c.model_dump() for c in courses]})
