from typing import Optional
from sqlalchemy.orm import Session

from bookswap.config import Settings
from bookswap.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from bookswap.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
)
from bookswap.repositories.user_repository import UserRepository
from bookswap.schemas.auth import LoginResponse, RegisterRequest, Token
from bookswap.schemas.user import User as UserSchema
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.user_repo = UserRepository(db)
        self.settings = settings

    def register(self, request: RegisterRequest) -> UserSchema:
        """이메일/비밀번호 회원가입 (잔액 0 으로 시작)"""
        email = str(request.email).lower()
        if self.user_repo.email_exists(email):
            raise ConflictError("Email already registered", details={"field": "email"})
        if self.user_repo.username_taken(request.username):
            raise ConflictError("Username already taken", details={"field": "username"})

        user = self.user_repo.create_user(
            email=email,
            username=request.username,
            password_hash=hash_password(request.password),
        )
        logger.info(f"New user registered: {user.id}")
        return user

    def login(self, email: str, password: str) -> LoginResponse:
        """로그인 - 성공 시 JWT 발급"""
        credentials = self.user_repo.get_credentials_by_email(email.lower())
        if credentials is None or not verify_password(password, credentials.password_hash):
            raise AuthenticationError("Invalid email or password")
        if credentials.is_blocked:
            raise AuthorizationError("This account has been blocked")

        self.user_repo.update_last_login(credentials.id)
        access_token = create_access_token(
            data={"sub": credentials.email, "user_id": credentials.id}
        )
        logger.info(f"User {credentials.id} logged in")

        return LoginResponse(
            user_id=credentials.id,
            username=credentials.username,
            is_admin=credentials.is_admin,
            access_token=access_token,
        )

    def get_current_user(self, token: str) -> Optional[UserSchema]:
        """토큰으로 현재 사용자 조회"""
        payload = decode_access_token(token)
        if payload is None:
            return None
        return self.user_repo.get_by_id(payload.user_id)

    def refresh_token(self, current_token: str) -> Optional[Token]:
        """토큰 갱신"""
        user = self.get_current_user(current_token)
        if user is None or user.is_blocked:
            return None

        access_token = create_access_token(data={"sub": user.email, "user_id": user.id})
        return Token(access_token=access_token, token_type="bearer")
