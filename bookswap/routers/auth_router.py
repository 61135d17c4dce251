from typing import Any
from fastapi import APIRouter, Depends, status
import logging

from bookswap.deps import get_auth_service
from bookswap.services.auth_service import AuthService
from bookswap.schemas.auth import BaseResponse, LoginRequest, RegisterRequest
from bookswap.schemas.user import UserProfile

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=BaseResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """이메일 회원가입"""
    user = auth_service.register(request)
    return BaseResponse(
        success=True,
        data={"user": UserProfile.model_validate(user.model_dump()).model_dump(mode="json")},
    )


@router.post("/login", response_model=BaseResponse)
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> Any:
    """로그인 - JWT 액세스 토큰 발급"""
    result = auth_service.login(str(request.email), request.password)
    return BaseResponse(success=True, data=result.model_dump())
