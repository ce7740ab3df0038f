"""
套餐相关API（公开）
"""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.database import get_db
from backoffice.core.exceptions import PlanNotFoundError
from backoffice.schemas.billing import PlanListResponse, PlanResponse
from backoffice.schemas.common import ApiResponse
from backoffice.services.plan_service import PlanService

router = APIRouter()


@router.get("", response_model=ApiResponse[PlanListResponse])
async def get_plans(
    db: AsyncSession = Depends(get_db)
):
    """获取可购买的套餐列表"""
    plans = await PlanService(db).get_active_plans()
    return ApiResponse(data=PlanListResponse(
        plans=[PlanResponse.model_validate(p) for p in plans],
        total=len(plans),
    ))


@router.get("/{plan_id}", response_model=ApiResponse[PlanResponse])
async def get_plan(
    plan_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """获取套餐详情（已下架的套餐视为不存在）"""
    plan = await PlanService(db).get_active_plan(plan_id)
    if not plan:
        raise PlanNotFoundError()
    return ApiResponse(data=PlanResponse.model_validate(plan))
