"""审计日志 Schema"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AuditLogItem(BaseModel):
    """一条操作记录；操作人已被删除时 user_id 为空"""
    id: int
    user_id: Optional[int] = None
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    detail: Optional[str] = None
    ip: Optional[str] = None
    request_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
