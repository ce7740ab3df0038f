"""
用户服务：后台用户列表、更新与删除
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.core.exceptions import (
    ForbiddenError,
    HasActiveSubscriptionError,
    InvalidInputError,
    NotFoundError,
)
from backoffice.models.enums import SubscriptionStatus
from backoffice.models.order import Order
from backoffice.models.subscription import UserSubscription
from backoffice.models.user import User
from backoffice.schemas.admin import AdminUserItem, AdminUserUpdate, SubscriptionSummary
from backoffice.schemas.common import PaginationMeta
from backoffice.utils.pagination import build_meta, normalize_page

logger = logging.getLogger(__name__)


class UserService:
    """用户服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        """获取用户"""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def list_users(self, page: int = 1, page_size: int = 20) -> tuple[List[AdminUserItem], PaginationMeta]:
        """分页获取用户列表，附带订单数、订阅数与最近一条订阅"""
        page, page_size = normalize_page(page, page_size)
        offset = (page - 1) * page_size

        total = await self.db.scalar(select(func.count()).select_from(User)) or 0
        result = await self.db.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(page_size)
        )
        users = result.scalars().all()
        ids = [u.id for u in users]

        order_counts = {}
        sub_counts = {}
        latest_subs = {}
        if ids:
            rows = await self.db.execute(
                select(Order.user_id, func.count()).where(Order.user_id.in_(ids)).group_by(Order.user_id)
            )
            order_counts = dict(rows.all())
            rows = await self.db.execute(
                select(UserSubscription.user_id, func.count())
                .where(UserSubscription.user_id.in_(ids))
                .group_by(UserSubscription.user_id)
            )
            sub_counts = dict(rows.all())
            subs = await self.db.execute(
                select(UserSubscription)
                .options(selectinload(UserSubscription.plan))
                .where(UserSubscription.user_id.in_(ids))
                .order_by(UserSubscription.end_at.desc())
            )
            for sub in subs.scalars().all():
                # 按 end_at 倒序，每个用户取第一条
                latest_subs.setdefault(sub.user_id, sub)

        items = []
        for u in users:
            sub = latest_subs.get(u.id)
            items.append(
                AdminUserItem(
                    id=u.id,
                    email=u.email,
                    name=u.name,
                    role=u.role,
                    created_at=u.created_at,
                    updated_at=u.updated_at,
                    orders_count=order_counts.get(u.id, 0),
                    subscriptions_count=sub_counts.get(u.id, 0),
                    active_subscription=SubscriptionSummary(
                        plan_name=sub.plan.name,
                        status=sub.status,
                        start_at=sub.start_at,
                        end_at=sub.end_at,
                    ) if sub else None,
                )
            )
        return items, build_meta(page, page_size, total)

    async def update_user(self, user_id: int, data: AdminUserUpdate) -> User:
        """更新用户角色和/或名称"""
        changes = {}
        if data.role is not None:
            changes["role"] = data.role.value
        if isinstance(data.name, str) and data.name.strip():
            changes["name"] = data.name.strip()
        if not changes:
            raise InvalidInputError("没有可更新的字段")

        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError("用户不存在")
        for field, value in changes.items():
            setattr(user, field, value)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def has_active_subscription(self, user_id: int, now: Optional[datetime] = None) -> bool:
        """是否存在状态为 ACTIVE 且尚未到期的订阅"""
        if now is None:
            now = datetime.now(timezone.utc)
        sub_id = await self.db.scalar(
            select(UserSubscription.id)
            .where(
                UserSubscription.user_id == user_id,
                UserSubscription.status == SubscriptionStatus.ACTIVE.value,
                UserSubscription.end_at > now,
            )
            .limit(1)
        )
        return sub_id is not None

    async def delete_user(self, user_id: int, operator_id: int) -> None:
        """
        删除用户：不能删除自己；仍在订阅期内的用户不能删除。
        订阅、订单、用户在同一事务内删除，失败整体回滚。
        """
        if user_id == operator_id:
            raise ForbiddenError("不能删除当前登录的管理员账号")

        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError("用户不存在")

        if await self.has_active_subscription(user_id):
            raise HasActiveSubscriptionError()

        try:
            await self.db.execute(delete(UserSubscription).where(UserSubscription.user_id == user_id))
            await self.db.execute(delete(Order).where(Order.user_id == user_id))
            await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.error("删除用户 %s 失败，事务已回滚", user_id)
            raise
        logger.info("用户 %s 已被管理员 %s 删除", user_id, operator_id)
