"""
기본 카탈로그/관리자 시드 스크립트
카테고리, 학과, 강의와 초기 관리자 계정을 생성
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from bookswap.core.security import hash_password
from bookswap.database.connection import SessionLocal
from bookswap.models import Category, Course, Department, User

DEFAULT_CATEGORIES = [
    ("Textbooks", "Required and recommended course textbooks"),
    ("Lecture Notes", "Printed notes and study guides"),
    ("Exam Prep", "Past papers and exam preparation books"),
    ("Novels", None),
]

DEFAULT_DEPARTMENTS = ["Computer Science", "Mathematics", "Economics", "Physics"]

# (code, name, department, category)
DEFAULT_COURSES = [
    ("CS101", "Introduction to Programming", "Computer Science", "Textbooks"),
    ("CS201", "Data Structures", "Computer Science", "Textbooks"),
    ("MATH110", "Calculus I", "Mathematics", "Textbooks"),
    ("ECON100", "Principles of Economics", "Economics", "Lecture Notes"),
    ("PHYS150", "General Physics", "Physics", "Exam Prep"),
]


def _get_or_create(db: Session, model, defaults=None, **lookup):
    instance = db.query(model).filter_by(**lookup).first()
    if instance:
        return instance, False
    instance = model(**lookup, **(defaults or {}))
    db.add(instance)
    db.flush()
    return instance, True


def seed_catalog_data(db: Session):
    """기본 카테고리/학과/강의 시드"""
    categories = {}
    for name, description in DEFAULT_CATEGORIES:
        category, _ = _get_or_create(
            db, Category, defaults={"description": description}, name=name
        )
        categories[name] = category

    departments = {}
    for name in DEFAULT_DEPARTMENTS:
        department, _ = _get_or_create(db, Department, name=name)
        departments[name] = department

    created = 0
    for code, name, department, category in DEFAULT_COURSES:
        _, is_new = _get_or_create(
            db,
            Course,
            defaults={
                "name": name,
                "department_id": departments[department].id,
                "category_id": categories[category].id,
            },
            code=code,
        )
        created += int(is_new)

    print(
        f"✅ 카탈로그 시드 완료: 카테고리 {len(categories)}개, "
        f"학과 {len(departments)}개, 신규 강의 {created}개"
    )


def seed_admin_user(db: Session):
    """초기 관리자 계정 시드 (ADMIN_EMAIL / ADMIN_PASSWORD 환경변수)"""
    email = os.getenv("ADMIN_EMAIL", "admin@example.com").lower()
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("⚠️ ADMIN_PASSWORD가 설정되지 않아 관리자 계정 생성을 건너뜁니다")
        return

    _, created = _get_or_create(
        db,
        User,
        defaults={
            "username": os.getenv("ADMIN_USERNAME", "admin"),
            "password_hash": hash_password(password),
            "is_admin": True,
        },
        email=email,
    )
    print(f"✅ 관리자 계정 {'생성' if created else '이미 존재'}: {email}")


def main():
    db = SessionLocal()
    try:
        seed_catalog_data(db)
        seed_admin_user(db)
        db.commit()
    except Exception as e:
        db.rollback()
        print(f"❌ 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
