"""
业务异常：服务层抛出，由 main.py 中的异常处理器统一转换为
{"code": ..., "message": ...} 响应
"""
from fastapi import status


class ServiceError(Exception):
    """业务规则错误基类"""

    code: str = "INTERNAL_ERROR"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "服务器内部错误"

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """资源不存在，或不属于当前用户（两种情况不作区分）"""
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "资源不存在"


class PlanNotFoundError(ServiceError):
    code = "PLAN_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "套餐不存在或已下架"


class InvalidStatusError(ServiceError):
    """当前状态不满足操作前置条件"""
    code = "INVALID_STATUS"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "当前状态不允许该操作"


class InvalidInputError(ServiceError):
    code = "INVALID_INPUT"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "请求参数无效"


class HasActiveSubscriptionError(ServiceError):
    code = "HAS_ACTIVE_SUBSCRIPTION"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "该用户当前仍在订阅期内，暂不允许删除"


class PlanInUseError(ServiceError):
    code = "PLAN_IN_USE"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "该套餐已有订单或订阅记录，请改为下架"


class UnauthorizedError(ServiceError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "未登录"


class ForbiddenError(ServiceError):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "没有权限访问该接口"


class ConflictError(ServiceError):
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT
    default_message = "资源冲突"


class InternalServiceError(ServiceError):
    """非预期失败（如订单号冲突、存储不可用），原因只记日志不返回给调用方"""
