"""
认证相关Schema
"""
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

from backoffice.models.enums import UserRole


class UserCreate(BaseModel):
    """用户注册"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: Optional[str] = None


class UserResponse(BaseModel):
    """用户响应"""
    id: int
    email: str
    name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Identity(BaseModel):
    """已验证的调用方身份，来自登录令牌"""
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Token(BaseModel):
    """Token响应"""
    access_token: str
    token_type: str = "bearer"
