from typing import Iterable, Optional, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import or_, update
from datetime import datetime, timezone

from bookswap.models.user import User as UserModel
from bookswap.schemas.user import User as UserSchema, UserCredentials, UserProfile
from bookswap.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel, UserSchema]):
    """사용자 리포지토리 - 잔액 변경은 원장 서비스를 통해서만 호출"""

    def __init__(self, db: Session):
        super().__init__(UserModel, UserSchema, db)

    def get_by_email(self, email: str) -> Optional[UserSchema]:
        """이메일로 사용자 조회"""
        return self.get_by_field("email", email)

    def get_credentials_by_email(self, email: str) -> Optional[UserCredentials]:
        """로그인 검증용 - 비밀번호 해시 포함"""
        self._ensure_clean_session()
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.email == email)
            .first()
        )
        if model_instance is None:
            return None
        return UserCredentials.model_validate(model_instance)

    def create_user(
        self, email: str, username: str, password_hash: str, is_admin: bool = False
    ) -> Optional[UserSchema]:
        """로컬 사용자 생성 (잔액 0)"""
        return self.create(
            email=email,
            username=username,
            password_hash=password_hash,
            balance=0,
            is_admin=is_admin,
            is_blocked=False,
            violation_count=0,
        )

    def update_last_login(
        self, user_id: int, login_time: Optional[datetime] = None
    ) -> Optional[UserSchema]:
        """마지막 로그인 시간 업데이트"""
        if login_time is None:
            login_time = datetime.now(timezone.utc)

        return self.update(user_id, last_login_at=login_time)

    def get_user_profile(self, user_id: int) -> Optional[UserProfile]:
        """사용자 프로필 조회 (UserProfile 스키마 반환)"""
        model_instance = (
            self.db.query(self.model_class)
            .filter(self.model_class.id == user_id)
            .first()
        )

        if not model_instance:
            return None

        return UserProfile.model_validate(model_instance)

    def email_exists(self, email: str) -> bool:
        """이메일 중복 체크"""
        return self.exists(filters={"email": email})

    def username_taken(self, username: str, exclude_user_id: Optional[int] = None) -> bool:
        """사용자명 중복 체크 (본인 제외)"""
        query = self.db.query(self.model_class).filter(
            self.model_class.username == username
        )
        if exclude_user_id is not None:
            query = query.filter(self.model_class.id != exclude_user_id)
        return query.first() is not None

    def list_users(
        self,
        is_admin: Optional[bool] = None,
        is_blocked: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[UserSchema], int]:
        """관리자용 사용자 목록 (최신 가입순)"""
        self._ensure_clean_session()
        query = self.db.query(self.model_class)
        if is_admin is not None:
            query = query.filter(self.model_class.is_admin == is_admin)
        if is_blocked is not None:
            query = query.filter(self.model_class.is_blocked == is_blocked)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    self.model_class.username.ilike(pattern),
                    self.model_class.email.ilike(pattern),
                )
            )
        query = query.order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
        return self._paginate(query, limit, offset)

    def set_blocked(self, user_id: int, blocked: bool) -> Optional[UserSchema]:
        return self.update(user_id, is_blocked=blocked)

    # ------------------------------------------------------------------
    # 잔액/위반 카운터 - 호출자의 트랜잭션 안에서만 사용 (commit 하지 않음)
    # ------------------------------------------------------------------

    def lock_users(self, user_ids: Iterable[int]) -> List[UserSchema]:
        """사용자 행을 id 오름차순으로 잠금 (교착 상태 방지)"""
        ids = sorted(set(user_ids))
        instances = (
            self.db.query(self.model_class)
            .filter(self.model_class.id.in_(ids))
            .order_by(self.model_class.id)
            .with_for_update()
            .populate_existing()
            .all()
        )
        return self._to_schemas(instances)

    def get_balance(self, user_id: int) -> Optional[int]:
        """DB의 최신 잔액 (identity map 캐시를 무시)"""
        instance = (
            self.db.query(self.model_class)
            .populate_existing()
            .filter(self.model_class.id == user_id)
            .first()
        )
        return instance.balance if instance is not None else None

    def apply_balance_delta(self, user_id: int, delta: int) -> Optional[int]:
        """조건부 잔액 변경

        잔액이 음수가 되는 경우 어떤 행도 갱신하지 않고 None 을 반환한다.
        성공 시 변경 후 잔액을 반환한다.
        """
        result = self.db.execute(
            update(self.model_class)
            .where(
                self.model_class.id == user_id,
                self.model_class.balance + delta >= 0,
            )
            .values(balance=self.model_class.balance + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return self.get_balance(user_id)

    def increment_violation_count(self, user_id: int) -> bool:
        result = self.db.execute(
            update(self.model_class)
            .where(self.model_class.id == user_id)
            .values(violation_count=self.model_class.violation_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
