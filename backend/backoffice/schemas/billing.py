"""
套餐与订单相关Schema
"""
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from backoffice.models.enums import BillingCycle, OrderStatus, PaymentChannel


class PlanCreate(BaseModel):
    """套餐创建"""
    name: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    description: Optional[str] = None
    is_active: bool = True


class PlanUpdate(BaseModel):
    """套餐更新（只更新传入的字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    billing_cycle: Optional[BillingCycle] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PlanResponse(BaseModel):
    """套餐响应"""
    id: int
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    billing_cycle: BillingCycle
    is_active: bool

    class Config:
        from_attributes = True


class PlanListResponse(BaseModel):
    """套餐列表响应"""
    plans: List[PlanResponse]
    total: int


class OrderCreate(BaseModel):
    """订单创建；不传支付渠道时使用默认渠道"""
    plan_id: int = Field(..., gt=0)
    payment_channel: Optional[PaymentChannel] = None


class OrderResponse(BaseModel):
    """订单响应"""
    id: int
    order_no: str
    user_id: int
    plan_id: int
    amount: float
    currency: str
    status: OrderStatus
    payment_channel: PaymentChannel
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderWithPlanResponse(OrderResponse):
    """用户订单列表项（含套餐信息）"""
    plan: Optional[PlanResponse] = None


class OrderCreatedResponse(BaseModel):
    """下单结果：订单与支付链接"""
    order: OrderResponse
    payment_url: str


class OrderStatusResponse(BaseModel):
    """状态变更结果"""
    id: int
    status: OrderStatus

    class Config:
        from_attributes = True


class AdminOrderItem(BaseModel):
    """后台订单列表项"""
    id: int
    order_no: str
    user_email: str
    plan_name: str
    amount: float
    currency: str
    status: OrderStatus
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
