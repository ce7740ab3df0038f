"""
通用依赖：调用方身份、管理员校验、客户端 IP
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from backoffice.core.config import settings
from backoffice.core.exceptions import ForbiddenError, UnauthorizedError
from backoffice.schemas.auth import Identity
from backoffice.services.auth_service import decode_identity

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def get_client_ip(request: Request) -> Optional[str]:
    """优先取反向代理头中的第一个地址"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def get_current_identity(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> Identity:
    """从 Authorization: Bearer 或 auth_token Cookie 中解析身份，缺失或无效返回 401"""
    token = token or request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise UnauthorizedError("未登录")
    return decode_identity(token)


async def require_admin(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """管理员接口：非管理员返回 403"""
    if not identity.is_admin:
        raise ForbiddenError()
    return identity
