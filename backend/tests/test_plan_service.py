from decimal import Decimal

import pytest

from backoffice.core.exceptions import NotFoundError, PlanInUseError
from backoffice.models import BillingCycle, SubscriptionStatus
from backoffice.schemas.billing import PlanCreate, PlanUpdate
from backoffice.services.plan_service import PlanService


async def test_active_plans_sorted_by_price(db, make_plan):
    await make_plan(name="Yearly", price="199")
    await make_plan(name="Basic", price="9.9")
    await make_plan(name="Hidden", price="1", is_active=False)

    plans = await PlanService(db).get_active_plans()
    assert [p.name for p in plans] == ["Basic", "Yearly"]


async def test_all_plans_include_inactive(db, make_plan):
    await make_plan(name="A")
    await make_plan(name="B", is_active=False)
    plans = await PlanService(db).get_all_plans()
    assert [p.name for p in plans] == ["A", "B"]


async def test_create_plan(db):
    plan = await PlanService(db).create_plan(PlanCreate(
        name="Team",
        price=Decimal("49.5"),
        currency="eur",
        billing_cycle=BillingCycle.YEARLY,
        description="for teams",
    ))
    assert plan.id is not None
    assert plan.currency == "EUR"
    assert plan.billing_cycle == BillingCycle.YEARLY
    assert plan.is_active is True


async def test_update_plan_partial(db, plan):
    updated = await PlanService(db).update_plan(plan.id, PlanUpdate(price=Decimal("79"), is_active=False))
    assert updated.price == Decimal("79")
    assert updated.is_active is False
    assert updated.name == "Pro"


async def test_update_plan_ignores_null_for_required_fields(db, plan):
    updated = await PlanService(db).update_plan(plan.id, PlanUpdate(name=None, description=None))
    assert updated.name == "Pro"
    assert updated.description is None


async def test_update_missing_plan(db):
    with pytest.raises(NotFoundError):
        await PlanService(db).update_plan(999, PlanUpdate(name="x"))


async def test_deactivated_plan_is_not_purchasable(db, plan):
    service = PlanService(db)
    await service.update_plan(plan.id, PlanUpdate(is_active=False))
    assert await service.get_active_plan(plan.id) is None
    assert await service.get_plan(plan.id) is not None


async def test_delete_unused_plan(db, plan):
    service = PlanService(db)
    plan_id = plan.id
    await service.delete_plan(plan_id)
    assert await service.get_plan(plan_id) is None


async def test_delete_plan_with_orders(db, user, plan, make_order):
    await make_order(user, plan)
    with pytest.raises(PlanInUseError):
        await PlanService(db).delete_plan(plan.id)


async def test_delete_plan_with_subscriptions(db, user, plan, make_subscription):
    await make_subscription(user, plan, SubscriptionStatus.EXPIRED, days_left=-1)
    with pytest.raises(PlanInUseError):
        await PlanService(db).delete_plan(plan.id)


async def test_delete_missing_plan(db):
    with pytest.raises(NotFoundError):
        await PlanService(db).delete_plan(999)
