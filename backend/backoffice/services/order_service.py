"""
订单服务：下单、用户取消、用户申请退款、管理员同意退款

状态变更一律使用条件更新（WHERE id=? AND status=?），
只有恰好影响一行时才算成功，避免并发请求同时通过状态检查。
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.constants.order_status import (
    EVENT_APPROVE_REFUND,
    EVENT_CANCEL,
    EVENT_REQUEST_REFUND,
    INITIAL_STATUS,
    next_status,
    source_status,
)
from backoffice.core.config import settings
from backoffice.core.exceptions import (
    InternalServiceError,
    InvalidStatusError,
    NotFoundError,
    PlanNotFoundError,
    UnauthorizedError,
)
from backoffice.models.enums import OrderStatus, PaymentChannel
from backoffice.models.order import Order
from backoffice.models.plan import MembershipPlan
from backoffice.models.user import User
from backoffice.schemas.billing import AdminOrderItem
from backoffice.services.plan_service import PlanService
from backoffice.utils.id_generator import generate_order_no

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND_MESSAGE = "订单不存在"

INVALID_STATUS_MESSAGES = {
    EVENT_CANCEL: "只有待支付订单可以取消",
    EVENT_REQUEST_REFUND: "只有已支付订单可以申请退款",
    EVENT_APPROVE_REFUND: "只有处于退款申请中的订单可以执行退款",
}


def build_payment_url(order_no: str) -> str:
    """支付链接（占位实现，未接入真实支付网关）"""
    return f"{settings.PAYMENT_BASE_URL.rstrip('/')}/{order_no}"


class OrderService:
    """订单服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        user_id: int,
        plan_id: int,
        payment_channel: Optional[PaymentChannel] = None,
    ) -> tuple[Order, str]:
        """为指定用户创建待支付订单，返回 (订单, 支付链接)"""
        # 令牌在有效期内但账号已被删除
        if await self.db.get(User, user_id) is None:
            raise UnauthorizedError("登录状态无效，请重新登录")

        plan = await PlanService(self.db).get_active_plan(plan_id)
        if not plan:
            raise PlanNotFoundError()

        channel = PaymentChannel(payment_channel or settings.DEFAULT_PAYMENT_CHANNEL)
        order_no = generate_order_no()

        order = Order(
            order_no=order_no,
            user_id=user_id,
            plan_id=plan.id,
            amount=plan.price,
            currency=plan.currency,
            status=INITIAL_STATUS.value,
            payment_channel=channel.value,
        )
        self.db.add(order)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error("创建订单失败 order_no=%s user_id=%s: %s", order_no, user_id, e)
            raise InternalServiceError("创建订单失败，请稍后重试") from e
        await self.db.refresh(order)

        logger.info("订单已创建 %s user_id=%s plan_id=%s amount=%s %s", order.order_no, user_id, plan.id, order.amount, order.currency)
        return order, build_payment_url(order.order_no)

    async def get_order(self, order_id: int, user_id: Optional[int] = None) -> Optional[Order]:
        """按 ID 获取订单；传入 user_id 时只返回该用户自己的订单"""
        stmt = select(Order).where(Order.id == order_id)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_orders_for_user(self, user_id: int) -> List[Order]:
        """查询用户的订单（含套餐），按创建时间倒序"""
        result = await self.db.execute(
            select(Order)
            .options(selectinload(Order.plan))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    async def list_all_orders(self, limit: Optional[int] = None) -> List[AdminOrderItem]:
        """后台订单列表，按创建时间倒序，最多 limit 条"""
        if limit is None:
            limit = settings.ADMIN_ORDERS_LIMIT
        result = await self.db.execute(
            select(Order, User.email, MembershipPlan.name)
            .join(User, Order.user_id == User.id)
            .join(MembershipPlan, Order.plan_id == MembershipPlan.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        )
        return [
            AdminOrderItem(
                id=o.id,
                order_no=o.order_no,
                user_email=email,
                plan_name=plan_name,
                amount=float(o.amount),
                currency=o.currency,
                status=o.status,
                created_at=o.created_at,
                paid_at=o.paid_at,
            )
            for o, email, plan_name in result.all()
        ]

    async def cancel_order_for_user(self, order_id: int, user_id: int) -> Order:
        """用户取消自己的待支付订单"""
        return await self._transition(order_id, EVENT_CANCEL, owner_id=user_id)

    async def request_refund_for_user(self, order_id: int, user_id: int) -> Order:
        """用户对自己已支付的订单发起退款申请（只记录意向，不调用支付网关）"""
        return await self._transition(order_id, EVENT_REQUEST_REFUND, owner_id=user_id)

    async def approve_refund_for_order(self, order_id: int) -> Order:
        """管理员同意退款；调用方须已校验管理员身份"""
        return await self._transition(order_id, EVENT_APPROVE_REFUND)

    async def update_status_if(
        self,
        order_id: int,
        expected: OrderStatus,
        new_status: OrderStatus,
        owner_id: Optional[int] = None,
    ) -> bool:
        """条件更新：仅当订单当前状态为 expected 时改为 new_status，不提交事务"""
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status == OrderStatus(expected).value)
            .values(status=OrderStatus(new_status).value)
            .execution_options(synchronize_session=False)
        )
        if owner_id is not None:
            stmt = stmt.where(Order.user_id == owner_id)
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def _transition(self, order_id: int, event: str, owner_id: Optional[int] = None) -> Order:
        order = await self.get_order(order_id, owner_id)
        if not order:
            raise NotFoundError(ORDER_NOT_FOUND_MESSAGE)

        current = order.status
        target = next_status(current, event)
        if target is None:
            raise InvalidStatusError(INVALID_STATUS_MESSAGES[event])

        changed = await self.update_status_if(order.id, source_status(event), target, owner_id)
        if not changed:
            # 读取之后被并发请求改了状态
            logger.warning("订单 %s 状态已被并发修改，拒绝 %s", order.order_no, event)
            await self.db.rollback()
            raise InvalidStatusError(INVALID_STATUS_MESSAGES[event])

        await self.db.commit()
        await self.db.refresh(order)
        logger.info("订单 %s 状态变更 %s -> %s", order.order_no, current, order.status)
        return order
