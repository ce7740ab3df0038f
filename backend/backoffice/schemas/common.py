"""
通用响应结构
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """分页信息（页码从 1 开始）"""
    page: int
    page_size: int
    total: int
    total_pages: int


class ApiResponse(BaseModel, Generic[T]):
    """统一响应：code 为 OK 或错误码"""
    code: str = "OK"
    data: Optional[T] = None
    message: Optional[str] = None
    meta: Optional[PaginationMeta] = None


class ErrorResponse(BaseModel):
    code: str
    message: str
    request_id: Optional[str] = None
