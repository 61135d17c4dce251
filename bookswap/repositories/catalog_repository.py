from typing import List, Optional

from sqlalchemy.orm import Session

from bookswap.models.catalog import Category, Course, Department
from bookswap.repositories.base import BaseRepository
from bookswap.schemas.catalog import CategorySchema, CourseSchema, DepartmentSchema


class CategoryRepository(BaseRepository[Category, CategorySchema]):
    def __init__(self, db: Session):
        super().__init__(Category, CategorySchema, db)

    def list_all(self) -> List[CategorySchema]:
        return self.find_all(order_by="name")


class DepartmentRepository(BaseRepository[Department, DepartmentSchema]):
    def __init__(self, db: Session):
        super().__init__(Department, DepartmentSchema, db)

    def list_all(self) -> List[DepartmentSchema]:
        return self.find_all(order_by="name")


class CourseRepository(BaseRepository[Course, CourseSchema]):
    def __init__(self, db: Session):
        super().__init__(Course, CourseSchema, db)

    def search(
        self,
        department_id: Optional[int] = None,
        category_id: Optional[int] = None,
        keyword: Optional[str] = None,
    ) -> List[CourseSchema]:
        """학과/분류/키워드(이름 또는 코드)로 과목 검색"""
        self._ensure_clean_session()
        query = self.db.query(Course)
        if department_id is not None:
            query = query.filter(Course.department_id == department_id)
        if category_id is not None:
            query = query.filter(Course.category_id == category_id)
        if keyword:
            pattern = f"%{keyword.strip()}%"
            query = query.filter(Course.name.ilike(pattern) | Course.code.ilike(pattern))
        return self._to_schemas(query.order_by(Course.name).all())
