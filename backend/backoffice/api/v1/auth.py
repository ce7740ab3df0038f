"""
认证相关API
"""
from fastapi import APIRouter, Depends, Form, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.database import get_db
from backoffice.core.config import settings
from backoffice.core.exceptions import UnauthorizedError
from backoffice.schemas.auth import Identity, Token, UserCreate, UserResponse
from backoffice.schemas.common import ApiResponse
from backoffice.api.deps import get_current_identity
from backoffice.services.auth_service import AuthService, create_access_token
from backoffice.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """用户注册"""
    auth_service = AuthService(db)
    user = await auth_service.register_user(user_data)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.post("/login", response_model=ApiResponse[Token])
async def login(
    response: Response,
    email: str = Form(..., description="邮箱"),
    password: str = Form(..., description="密码"),
    db: AsyncSession = Depends(get_db),
):
    """用户登录：令牌同时写入 HttpOnly Cookie"""
    auth_service = AuthService(db)
    user = await auth_service.authenticate_user(email, password)
    if not user:
        raise UnauthorizedError("邮箱或密码错误")

    access_token = create_access_token(user.id, user.role)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=access_token,
        max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return ApiResponse(data=Token(access_token=access_token))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(response: Response):
    """退出登录：清除 Cookie"""
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return ApiResponse()


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_me(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """获取当前用户信息"""
    user = await UserService(db).get_user(identity.user_id)
    if not user:
        raise UnauthorizedError("登录状态无效，请重新登录")
    return ApiResponse(data=UserResponse.model_validate(user))
