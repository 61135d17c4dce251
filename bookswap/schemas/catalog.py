from typing import Optional

from pydantic import BaseModel, Field


class CategorySchema(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class DepartmentSchema(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CourseSchema(BaseModel):
    id: int
    code: Optional[str] = None
    name: str
    department_id: Optional[int] = None
    category_id: Optional[int] = None

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    department_id: Optional[int] = Field(None, alias="departmentId")
    category_id: Optional[int] = Field(None, alias="categoryId")

    class Config:
        populate_by_name = True


class CourseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    department_id: Optional[int] = Field(None, alias="departmentId")
    category_id: Optional[int] = Field(None, alias="categoryId")

    class Config:
        populate_by_name = True
