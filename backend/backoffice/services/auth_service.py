"""
认证服务（直接使用 bcrypt，避免 passlib 与 bcrypt 版本不兼容）
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import jwt, JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backoffice.core.config import settings
from backoffice.core.exceptions import ConflictError, UnauthorizedError
from backoffice.models.enums import UserRole
from backoffice.models.user import User
from backoffice.schemas.auth import Identity, UserCreate

logger = logging.getLogger(__name__)

# bcrypt 最多 72 字节，超长密码需截断（与注册/登录一致）
BCRYPT_MAX_BYTES = 72


def _truncate_password_72(password: str) -> bytes:
    """将密码截断为 72 字节（UTF-8），返回 bytes 供 bcrypt 使用"""
    b = password.encode("utf-8")
    if len(b) <= BCRYPT_MAX_BYTES:
        return b
    return b[:BCRYPT_MAX_BYTES]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    try:
        return bcrypt.checkpw(
            _truncate_password_72(plain_password),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """生成密码哈希"""
    return bcrypt.hashpw(
        _truncate_password_72(password),
        bcrypt.gensalt(),
    ).decode("utf-8")


def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """签发访问令牌，载荷为 {user_id, role}"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(user_id),
        "user_id": user_id,
        "role": UserRole(role).value,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_identity(token: str) -> Identity:
    """校验令牌并取出调用方身份；无效或过期抛 UnauthorizedError"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return Identity(user_id=payload.get("user_id"), role=payload.get("role"))
    except (JWTError, ValidationError):
        raise UnauthorizedError("登录状态无效，请重新登录")


class AuthService:
    """认证服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """验证用户"""
        user = await self.get_user_by_email(email)
        if not user:
            return None
        if not (user.password_hash and user.password_hash.strip()):
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def register_user(self, user_data: UserCreate, role: UserRole = UserRole.USER) -> User:
        """注册用户"""
        existing = await self.get_user_by_email(user_data.email)
        if existing:
            raise ConflictError("邮箱已存在", code="EMAIL_EXISTS")

        user = User(
            email=user_data.email.lower(),
            name=user_data.name.strip() if user_data.name and user_data.name.strip() else None,
            password_hash=get_password_hash(user_data.password),
            role=role.value,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def ensure_admin(self, email: str, password: str) -> User:
        """启动时确保初始管理员存在；已存在的账号提升为管理员，不修改密码"""
        user = await self.get_user_by_email(email)
        if user:
            if user.role != UserRole.ADMIN.value:
                user.role = UserRole.ADMIN.value
                await self.db.commit()
                await self.db.refresh(user)
                logger.info("已将用户 %s 提升为管理员", email)
            return user
        user = await self.register_user(
            UserCreate(email=email, password=password, name="admin"),
            role=UserRole.ADMIN,
        )
        logger.info("已创建初始管理员 %s", email)
        return user
