"""
后台用户管理Schema
"""
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from backoffice.models.enums import SubscriptionStatus, UserRole


class SubscriptionSummary(BaseModel):
    plan_name: str
    status: SubscriptionStatus
    start_at: datetime
    end_at: datetime


class AdminUserItem(BaseModel):
    """后台用户列表项"""
    id: int
    email: str
    name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    orders_count: int = 0
    subscriptions_count: int = 0
    active_subscription: Optional[SubscriptionSummary] = None


class AdminUserUpdate(BaseModel):
    """后台更新用户：角色和/或名称"""
    role: Optional[UserRole] = None
    name: Optional[str] = None
