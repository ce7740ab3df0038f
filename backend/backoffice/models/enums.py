"""
枚举定义：数据库中按字符串存储
"""
import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"  # 待支付
    PAID = "PAID"  # 已支付
    CANCELED = "CANCELED"  # 已取消
    REFUND_REQUESTED = "REFUND_REQUESTED"  # 退款申请中
    REFUNDED = "REFUNDED"  # 已退款


class PaymentChannel(str, enum.Enum):
    STRIPE = "STRIPE"
    ALIPAY = "ALIPAY"
    WECHAT = "WECHAT"


class BillingCycle(str, enum.Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"
