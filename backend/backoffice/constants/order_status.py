"""
订单状态机：允许的 (当前状态, 事件) -> 目标状态
"""
from backoffice.models.enums import OrderStatus

EVENT_PAYMENT_CONFIRMED = "payment_confirmed"  # 由支付回调驱动，不在本服务内执行
EVENT_CANCEL = "cancel"
EVENT_REQUEST_REFUND = "request_refund"
EVENT_APPROVE_REFUND = "approve_refund"

INITIAL_STATUS = OrderStatus.PENDING

ORDER_TRANSITIONS = {
    (OrderStatus.PENDING, EVENT_PAYMENT_CONFIRMED): OrderStatus.PAID,
    (OrderStatus.PENDING, EVENT_CANCEL): OrderStatus.CANCELED,
    (OrderStatus.PAID, EVENT_REQUEST_REFUND): OrderStatus.REFUND_REQUESTED,
    (OrderStatus.REFUND_REQUESTED, EVENT_APPROVE_REFUND): OrderStatus.REFUNDED,
}


def next_status(current, event: str):
    """返回事件作用后的目标状态，不允许的组合返回 None"""
    try:
        current = OrderStatus(current)
    except ValueError:
        return None
    return ORDER_TRANSITIONS.get((current, event))


def source_status(event: str) -> OrderStatus:
    """事件唯一合法的起始状态"""
    for (src, ev), _ in ORDER_TRANSITIONS.items():
        if ev == event:
            return src
    raise KeyError(event)
