"""
用户订单API：下单、订单列表、取消、申请退款
"""
from typing import List

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.database import get_db
from backoffice.schemas.auth import Identity
from backoffice.schemas.billing import (
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderWithPlanResponse,
)
from backoffice.schemas.common import ApiResponse
from backoffice.api.deps import get_client_ip, get_current_identity
from backoffice.services.audit_service import log_audit
from backoffice.services.order_service import OrderService

router = APIRouter()


@router.post("", response_model=ApiResponse[OrderCreatedResponse], status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """购买套餐：创建待支付订单并返回支付链接"""
    order_service = OrderService(db)
    order, payment_url = await order_service.create_order(identity.user_id, body.plan_id, body.payment_channel)
    await log_audit(db, identity.user_id, "create_order", "order", str(order.id), {"order_no": order.order_no, "plan_id": order.plan_id}, get_client_ip(request), getattr(request.state, "request_id", None))
    return ApiResponse(data=OrderCreatedResponse(
        order=OrderResponse.model_validate(order),
        payment_url=payment_url,
    ))


@router.get("", response_model=ApiResponse[List[OrderWithPlanResponse]])
async def list_my_orders(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """当前用户的订单列表"""
    orders = await OrderService(db).list_orders_for_user(identity.user_id)
    return ApiResponse(data=[OrderWithPlanResponse.model_validate(o) for o in orders])


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderStatusResponse])
async def cancel_order(
    request: Request,
    order_id: int = Path(..., gt=0),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """取消自己的待支付订单"""
    order = await OrderService(db).cancel_order_for_user(order_id, identity.user_id)
    await log_audit(db, identity.user_id, "cancel_order", "order", str(order.id), None, get_client_ip(request), getattr(request.state, "request_id", None))
    return ApiResponse(data=OrderStatusResponse.model_validate(order))


@router.post("/{order_id}/refund-request", response_model=ApiResponse[OrderStatusResponse])
async def request_refund(
    request: Request,
    order_id: int = Path(..., gt=0),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """对自己已支付的订单申请退款"""
    order = await OrderService(db).request_refund_for_user(order_id, identity.user_id)
    await log_audit(db, identity.user_id, "request_refund", "order", str(order.id), None, get_client_ip(request), getattr(request.state, "request_id", None))
    return ApiResponse(data=OrderStatusResponse.model_validate(order))
