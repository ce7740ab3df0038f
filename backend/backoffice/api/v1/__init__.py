"""
API v1 路由
"""
from fastapi import APIRouter
from backoffice.api.v1 import auth, plans, orders, admin, audit

api_router = APIRouter()

# 注册子路由
api_router.include_router(auth.router, prefix="/auth", tags=["认证"])
api_router.include_router(plans.router, prefix="/plans", tags=["套餐"])
api_router.include_router(orders.router, prefix="/account/orders", tags=["我的订单"])
api_router.include_router(admin.router, prefix="/admin", tags=["后台管理"])
api_router.include_router(audit.router, prefix="/audit-logs", tags=["审计"])
