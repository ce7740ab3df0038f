# Database models
from backoffice.models.enums import (
    UserRole,
    OrderStatus,
    PaymentChannel,
    BillingCycle,
    SubscriptionStatus,
)
from backoffice.models.user import User
from backoffice.models.plan import MembershipPlan
from backoffice.models.subscription import UserSubscription
from backoffice.models.order import Order
from backoffice.models.audit_log import AuditLog

__all__ = [
    "UserRole",
    "OrderStatus",
    "PaymentChannel",
    "BillingCycle",
    "SubscriptionStatus",
    "User",
    "MembershipPlan",
    "UserSubscription",
    "Order",
    "AuditLog",
]
