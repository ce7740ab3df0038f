"""
会员套餐模型
"""
from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backoffice.core.database import Base
from backoffice.models.enums import BillingCycle


class MembershipPlan(Base):
    """套餐表"""
    __tablename__ = "membership_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    billing_cycle = Column(String(20), nullable=False, default=BillingCycle.MONTHLY.value)  # MONTHLY, QUARTERLY, YEARLY
    is_active = Column(Boolean, nullable=False, default=True)  # 下架后不可再购买
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # 关系
    subscriptions = relationship("UserSubscription", back_populates="plan")
