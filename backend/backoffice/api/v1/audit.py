"""操作审计 API"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.database import get_db
from backoffice.schemas.audit import AuditLogItem
from backoffice.schemas.auth import Identity
from backoffice.schemas.common import ApiResponse
from backoffice.api.deps import get_current_identity
from backoffice.services.audit_service import list_audit_logs

router = APIRouter()


@router.get("", response_model=ApiResponse[List[AuditLogItem]])
async def get_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="按操作类型筛选，如 cancel_order"),
    resource_type: Optional[str] = Query(None, description="order / user / plan"),
    user_id: Optional[int] = Query(None, gt=0, description="按操作人筛选，仅管理员可用"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    普通用户只能看到自己的操作记录（忽略 user_id 参数）；
    管理员默认看到全部记录。
    """
    operator = user_id if identity.is_admin else identity.user_id
    items, meta = await list_audit_logs(db, page, page_size, operator, action, resource_type)
    return ApiResponse(data=[AuditLogItem.model_validate(x) for x in items], meta=meta)
