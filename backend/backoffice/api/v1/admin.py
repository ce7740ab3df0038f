"""
后台管理API：订单退款、用户管理、套餐管理（仅管理员）
"""
from typing import List

from fastapi import APIRouter, Depends, Path, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.database import get_db
from backoffice.schemas.admin import AdminUserItem, AdminUserUpdate
from backoffice.schemas.auth import Identity, UserResponse
from backoffice.schemas.billing import (
    AdminOrderItem,
    OrderStatusResponse,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
)
from backoffice.schemas.common import ApiResponse
from backoffice.api.deps import get_client_ip, require_admin
from backoffice.services.audit_service import log_audit
from backoffice.services.order_service import OrderService
from backoffice.services.plan_service import PlanService
from backoffice.services.user_service import UserService

router = APIRouter()


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


# ---------- 订单 ----------

@router.get("/orders", response_model=ApiResponse[List[AdminOrderItem]])
async def list_orders(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """全部订单（最近 ADMIN_ORDERS_LIMIT 条）"""
    orders = await OrderService(db).list_all_orders(settings.ADMIN_ORDERS_LIMIT)
    return ApiResponse(data=orders)


@router.post("/orders/{order_id}/refund", response_model=ApiResponse[OrderStatusResponse])
async def approve_refund(
    request: Request,
    order_id: int = Path(..., gt=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """同意退款"""
    order = await OrderService(db).approve_refund_for_order(order_id)
    await log_audit(db, admin.user_id, "approve_refund", "order", str(order.id), {"order_no": order.order_no}, get_client_ip(request), _request_id(request))
    return ApiResponse(data=OrderStatusResponse.model_validate(order))


# ---------- 用户 ----------

@router.get("/users", response_model=ApiResponse[List[AdminUserItem]])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.ADMIN_USERS_PAGE_SIZE, ge=1, le=100),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """分页查询用户"""
    items, meta = await UserService(db).list_users(page, page_size)
    return ApiResponse(data=items, meta=meta)


@router.patch("/users/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    body: AdminUserUpdate,
    request: Request,
    user_id: int = Path(..., gt=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """修改用户角色或名称"""
    user = await UserService(db).update_user(user_id, body)
    await log_audit(db, admin.user_id, "update_user", "user", str(user_id), body.model_dump(mode="json", exclude_none=True), get_client_ip(request), _request_id(request))
    return ApiResponse(data=UserResponse.model_validate(user))


@router.delete("/users/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    request: Request,
    user_id: int = Path(..., gt=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """删除用户（连同其订阅与订单）"""
    await UserService(db).delete_user(user_id, admin.user_id)
    await log_audit(db, admin.user_id, "delete_user", "user", str(user_id), None, get_client_ip(request), _request_id(request))
    return ApiResponse()


# ---------- 套餐 ----------

@router.get("/plans", response_model=ApiResponse[List[PlanResponse]])
async def list_plans(
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """全部套餐（含已下架）"""
    plans = await PlanService(db).get_all_plans()
    return ApiResponse(data=[PlanResponse.model_validate(p) for p in plans])


@router.post("/plans", response_model=ApiResponse[PlanResponse], status_code=status.HTTP_201_CREATED)
async def create_plan(
    body: PlanCreate,
    request: Request,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """创建套餐"""
    plan = await PlanService(db).create_plan(body)
    await log_audit(db, admin.user_id, "create_plan", "plan", str(plan.id), {"name": plan.name}, get_client_ip(request), _request_id(request))
    return ApiResponse(data=PlanResponse.model_validate(plan))


@router.patch("/plans/{plan_id}", response_model=ApiResponse[PlanResponse])
async def update_plan(
    body: PlanUpdate,
    request: Request,
    plan_id: int = Path(..., gt=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """更新套餐（改价不影响已有订单）"""
    plan = await PlanService(db).update_plan(plan_id, body)
    await log_audit(db, admin.user_id, "update_plan", "plan", str(plan_id), body.model_dump(mode="json", exclude_unset=True), get_client_ip(request), _request_id(request))
    return ApiResponse(data=PlanResponse.model_validate(plan))


@router.delete("/plans/{plan_id}", response_model=ApiResponse[None])
async def delete_plan(
    request: Request,
    plan_id: int = Path(..., gt=0),
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """删除套餐"""
    await PlanService(db).delete_plan(plan_id)
    await log_audit(db, admin.user_id, "delete_plan", "plan", str(plan_id), None, get_client_ip(request), _request_id(request))
    return ApiResponse()
