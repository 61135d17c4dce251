from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from bookswap.config import settings
from bookswap.database.session import get_db
from bookswap.services.auth_service import AuthService
from bookswap.schemas.user import User as UserSchema
from bookswap.core.exceptions import AuthenticationError, AuthorizationError

# JWT Bearer 토큰 스킴
security = HTTPBearer(auto_error=False)


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[UserSchema]:
    """선택적 사용자 인증 - 토큰이 없거나 유효하지 않아도 None 반환"""
    if not credentials:
        return None

    auth_service = AuthService(db, settings=settings)
    return auth_service.get_current_user(credentials.credentials)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> UserSchema:
    """필수 사용자 인증 - 유효한 토큰이 필요함"""
    if not credentials:
        raise AuthenticationError("Authentication required")

    auth_service = AuthService(db, settings=settings)
    user = auth_service.get_current_user(credentials.credentials)
    if not user:
        raise AuthenticationError("Invalid or expired token")
    return user


def get_current_active_user(
    current_user: UserSchema = Depends(get_current_user),
) -> UserSchema:
    """차단되지 않은 사용자만 허용"""
    if current_user.is_blocked:
        raise AuthorizationError("This account has been blocked")
    return current_user


def require_admin(
    current_user: UserSchema = Depends(get_current_active_user),
) -> UserSchema:
    """관리자 권한이 필요한 엔드포인트용 의존성"""
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user
