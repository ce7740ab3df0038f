"""
操作审计：写入与查询 audit_logs
"""
import json
import logging
from typing import Any, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.models.audit_log import AuditLog
from backoffice.schemas.common import PaginationMeta
from backoffice.utils.pagination import build_meta, normalize_page

logger = logging.getLogger(__name__)


def _dump_detail(detail: Any) -> Optional[str]:
    if detail is None or detail == {}:
        return None
    if isinstance(detail, dict):
        return json.dumps(detail, ensure_ascii=False, default=str)
    return str(detail)


async def log_audit(
    db: AsyncSession,
    user_id: Optional[int],
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    detail: Optional[dict[str, Any]] = None,
    ip: Optional[str] = None,
    request_id: Optional[str] = None,
) -> None:
    """
    记录一条操作日志。业务操作此时已提交，这里失败只告警并回滚本次写入，
    不会让请求失败。AUDIT_LOG_ENABLED=false 时直接跳过。
    """
    if not settings.AUDIT_LOG_ENABLED:
        return
    db.add(AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        detail=_dump_detail(detail),
        ip=ip,
        request_id=request_id,
    ))
    try:
        await db.commit()
    except SQLAlchemyError as e:
        logger.warning("审计日志写入失败 action=%s resource=%s/%s: %s", action, resource_type, resource_id, e)
        await db.rollback()


async def list_audit_logs(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
) -> tuple[List[AuditLog], PaginationMeta]:
    """按条件分页查询，最新的在前；user_id 为 None 时不限操作人"""
    page, page_size = normalize_page(page, page_size)

    conditions = []
    if user_id is not None:
        conditions.append(AuditLog.user_id == user_id)
    if action:
        conditions.append(AuditLog.action == action)
    if resource_type:
        conditions.append(AuditLog.resource_type == resource_type)

    total = await db.scalar(select(func.count()).select_from(AuditLog).where(*conditions)) or 0
    result = await db.execute(
        select(AuditLog)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), build_meta(page, page_size, total)
