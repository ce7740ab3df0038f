"""
套餐服务
"""
import logging
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.exceptions import NotFoundError, PlanInUseError
from backoffice.models.order import Order
from backoffice.models.plan import MembershipPlan
from backoffice.models.subscription import UserSubscription
from backoffice.schemas.billing import PlanCreate, PlanUpdate

logger = logging.getLogger(__name__)


class PlanService:
    """套餐服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_plans(self) -> List[MembershipPlan]:
        """获取可购买的套餐，按价格升序"""
        result = await self.db.execute(
            select(MembershipPlan)
            .where(MembershipPlan.is_active.is_(True))
            .order_by(MembershipPlan.price, MembershipPlan.id)
        )
        return list(result.scalars().all())

    async def get_all_plans(self) -> List[MembershipPlan]:
        """后台：全部套餐（含已下架）"""
        result = await self.db.execute(select(MembershipPlan).order_by(MembershipPlan.id))
        return list(result.scalars().all())

    async def get_plan(self, plan_id: int) -> Optional[MembershipPlan]:
        return await self.db.get(MembershipPlan, plan_id)

    async def get_active_plan(self, plan_id: int) -> Optional[MembershipPlan]:
        """获取可购买的套餐；不存在或已下架返回 None"""
        result = await self.db.execute(
            select(MembershipPlan).where(
                MembershipPlan.id == plan_id,
                MembershipPlan.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def create_plan(self, data: PlanCreate) -> MembershipPlan:
        plan = MembershipPlan(
            name=data.name,
            price=data.price,
            currency=data.currency.upper(),
            billing_cycle=data.billing_cycle.value,
            description=data.description,
            is_active=data.is_active,
        )
        self.db.add(plan)
        await self.db.commit()
        await self.db.refresh(plan)
        logger.info("套餐已创建 id=%s name=%s", plan.id, plan.name)
        return plan

    async def update_plan(self, plan_id: int, data: PlanUpdate) -> MembershipPlan:
        """更新套餐；已有订单保存的是下单时的价格，不受影响"""
        plan = await self.get_plan(plan_id)
        if not plan:
            raise NotFoundError("套餐不存在")

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field != "description":
                continue
            if field == "billing_cycle":
                value = value.value
            elif field == "currency":
                value = value.upper()
            setattr(plan, field, value)

        await self.db.commit()
        await self.db.refresh(plan)
        return plan

    async def delete_plan(self, plan_id: int) -> None:
        """删除套餐；已被订单或订阅引用的套餐只能下架"""
        plan = await self.get_plan(plan_id)
        if not plan:
            raise NotFoundError("套餐不存在")

        order_count = await self.db.scalar(
            select(func.count()).select_from(Order).where(Order.plan_id == plan_id)
        )
        sub_count = await self.db.scalar(
            select(func.count()).select_from(UserSubscription).where(UserSubscription.plan_id == plan_id)
        )
        if order_count or sub_count:
            raise PlanInUseError()

        await self.db.delete(plan)
        await self.db.commit()
        logger.info("套餐已删除 id=%s", plan_id)
