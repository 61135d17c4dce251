import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from bookswap.core.exceptions import ConflictError, NotFoundError, ValidationError
from bookswap.repositories.catalog_repository import (
    CategoryRepository,
    CourseRepository,
    DepartmentRepository,
)
from bookswap.repositories.posting_repository import PostingRepository
from bookswap.schemas.catalog import (
    CategoryCreate,
    CategorySchema,
    CategoryUpdate,
    CourseCreate,
    CourseSchema,
    CourseUpdate,
    DepartmentSchema,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """분류/학과/과목 카탈로그 서비스. 생성/수정/삭제는 관리자 라우터에서만 호출"""

    def __init__(self, db: Session):
        self.db = db
        self.category_repo = CategoryRepository(db)
        self.department_repo = DepartmentRepository(db)
        self.course_repo = CourseRepository(db)
        self.posting_repo = PostingRepository(db)

    def list_categories(self) -> List[CategorySchema]:
        return self.category_repo.list_all()

    def list_departments(self) -> List[DepartmentSchema]:
        return self.department_repo.list_all()

    def list_courses(
        self,
        department_id: Optional[int] = None,
        category_id: Optional[int] = None,
        keyword: Optional[str] = None,
    ) -> List[CourseSchema]:
        return self.course_repo.search(
            department_id=department_id, category_id=category_id, keyword=keyword
        )

    # Categories

    def create_category(self, data: CategoryCreate) -> CategorySchema:
        name = data.name.strip()
        if self.category_repo.exists({"name": name}):
            raise ConflictError("Category already exists", details={"name": name})
        category = self.category_repo.create(name=name, description=data.description)
        logger.info(f"Category created: {category.id} {name}")
        return category

    def update_category(self, category_id: int, data: CategoryUpdate) -> CategorySchema:
        if self.category_repo.get_by_id(category_id) is None:
            raise NotFoundError("Category not found", details={"category_id": category_id})
        fields = data.model_dump(exclude_unset=True)
        if fields.get("name") is not None:
            fields["name"] = fields["name"].strip()
            existing = self.category_repo.get_by_field("name", fields["name"])
            if existing is not None and existing.id != category_id:
                raise ConflictError("Category already exists", details={"name": fields["name"]})
        elif "name" in fields:
            del fields["name"]
        return self.category_repo.update(category_id, **fields)

    def delete_category(self, category_id: int) -> None:
        if self.category_repo.get_by_id(category_id) is None:
            raise NotFoundError("Category not found", details={"category_id": category_id})
        if self.posting_repo.references_catalog(category_id=category_id):
            raise ConflictError(
                "Category is used by existing postings", details={"category_id": category_id}
            )
        self.category_repo.delete(category_id)
        logger.info(f"Category deleted: {category_id}")

    # Courses

    def _validate_course_refs(self, department_id: Optional[int], category_id: Optional[int]) -> None:
        if department_id is not None and not self.department_repo.exists({"id": department_id}):
            raise ValidationError("Unknown department", details={"department_id": department_id})
        if category_id is not None and not self.category_repo.exists({"id": category_id}):
            raise ValidationError("Unknown category", details={"category_id": category_id})

    def create_course(self, data: CourseCreate) -> CourseSchema:
        self._validate_course_refs(data.department_id, data.category_id)
        course = self.course_repo.create(
            name=data.name.strip(),
            code=data.code,
            department_id=data.department_id,
            category_id=data.category_id,
        )
        logger.info(f"Course created: {course.id} {course.name}")
        return course

    def update_course(self, course_id: int, data: CourseUpdate) -> CourseSchema:
        if self.course_repo.get_by_id(course_id) is None:
            raise NotFoundError("Course not found", details={"course_id": course_id})
        fields = data.model_dump(exclude_unset=True)
        if "name" in fields:
            if fields["name"] is None:
                del fields["name"]
            else:
                fields["name"] = fields["name"].strip()
        self._validate_course_refs(fields.get("department_id"), fields.get("category_id"))
        return self.course_repo.update(course_id, **fields)

    def delete_course(self, course_id: int) -> None:
        if self.course_repo.get_by_id(course_id) is None:
            raise NotFoundError("Course not found", details={"course_id": course_id})
        if self.posting_repo.references_catalog(course_id=course_id):
            raise ConflictError(
                "Course is used by existing postings", details={"course_id": course_id}
            )
        self.course_repo.delete(course_id)
        logger.info(f"Course deleted: {course_id}")
