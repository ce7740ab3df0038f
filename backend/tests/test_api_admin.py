import pytest

from backoffice.models import OrderStatus, SubscriptionStatus

ADMIN = "/api/v1/admin"


@pytest.mark.parametrize("method,path", [
    ("get", "/orders"),
    ("post", "/orders/1/refund"),
    ("get", "/users"),
    ("delete", "/users/1"),
    ("get", "/plans"),
])
async def test_admin_routes_reject_regular_users(client, headers_for, user, method, path):
    resp = await client.request(method.upper(), ADMIN + path, headers=headers_for(user))
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


async def test_admin_routes_require_login(client):
    resp = await client.get(f"{ADMIN}/orders")
    assert resp.status_code == 401


# ---------- 订单 ----------

async def test_list_orders(client, headers_for, admin, user, plan, make_order):
    await make_order(user, plan)
    paid = await make_order(user, plan, OrderStatus.PAID)

    resp = await client.get(f"{ADMIN}/orders", headers=headers_for(admin))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 2
    assert data[0]["id"] == paid.id
    assert data[0]["user_email"] == user.email
    assert data[0]["plan_name"] == plan.name


async def test_approve_refund(client, headers_for, admin, user, plan, make_order, read_status):
    order = await make_order(user, plan, OrderStatus.PAID)
    resp = await client.post(f"/api/v1/account/orders/{order.id}/refund-request", headers=headers_for(user))
    assert resp.status_code == 200

    resp = await client.post(f"{ADMIN}/orders/{order.id}/refund", headers=headers_for(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "REFUNDED"
    assert await read_status(order.id) == OrderStatus.REFUNDED

    resp = await client.post(f"{ADMIN}/orders/{order.id}/refund", headers=headers_for(admin))
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_STATUS"


async def test_approve_refund_without_request(client, headers_for, admin, user, plan, make_order, read_status):
    order = await make_order(user, plan, OrderStatus.PAID)
    resp = await client.post(f"{ADMIN}/orders/{order.id}/refund", headers=headers_for(admin))
    assert resp.status_code == 400
    assert resp.json()["message"] == "只有处于退款申请中的订单可以执行退款"
    assert await read_status(order.id) == OrderStatus.PAID


async def test_approve_refund_missing_order(client, headers_for, admin):
    resp = await client.post(f"{ADMIN}/orders/999/refund", headers=headers_for(admin))
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


# ---------- 用户 ----------

async def test_list_users_with_meta(client, headers_for, admin, make_user):
    for i in range(3):
        await make_user(f"member{i}@example.com")

    resp = await client.get(f"{ADMIN}/users", params={"page": 2, "page_size": 3}, headers=headers_for(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"] == {"page": 2, "page_size": 3, "total": 4, "total_pages": 2}
    assert len(body["data"]) == 1


async def test_list_users_rejects_bad_page(client, headers_for, admin):
    resp = await client.get(f"{ADMIN}/users", params={"page": 0}, headers=headers_for(admin))
    assert resp.status_code == 422
    assert resp.json()["code"] == "INVALID_INPUT"


async def test_update_user_role(client, headers_for, admin, user):
    resp = await client.patch(f"{ADMIN}/users/{user.id}", json={"role": "ADMIN"}, headers=headers_for(admin))
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "ADMIN"


async def test_update_user_empty_body(client, headers_for, admin, user):
    resp = await client.patch(f"{ADMIN}/users/{user.id}", json={}, headers=headers_for(admin))
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_INPUT"


async def test_update_user_unknown_role(client, headers_for, admin, user):
    resp = await client.patch(f"{ADMIN}/users/{user.id}", json={"role": "ROOT"}, headers=headers_for(admin))
    assert resp.status_code == 422


async def test_delete_user(client, headers_for, admin, user, plan, make_order):
    await make_order(user, plan, OrderStatus.REFUNDED)
    user_id = user.id

    resp = await client.delete(f"{ADMIN}/users/{user_id}", headers=headers_for(admin))
    assert resp.status_code == 200
    assert resp.json()["code"] == "OK"

    resp = await client.get(f"{ADMIN}/users", headers=headers_for(admin))
    assert user_id not in [u["id"] for u in resp.json()["data"]]


async def test_delete_user_with_active_subscription(client, headers_for, admin, user, plan, make_subscription):
    await make_subscription(user, plan, SubscriptionStatus.ACTIVE, days_left=15)
    resp = await client.delete(f"{ADMIN}/users/{user.id}", headers=headers_for(admin))
    assert resp.status_code == 400
    assert resp.json()["code"] == "HAS_ACTIVE_SUBSCRIPTION"


async def test_delete_self(client, headers_for, admin):
    resp = await client.delete(f"{ADMIN}/users/{admin.id}", headers=headers_for(admin))
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


async def test_delete_missing_user(client, headers_for, admin):
    resp = await client.delete(f"{ADMIN}/users/999", headers=headers_for(admin))
    assert resp.status_code == 404


# ---------- 套餐 ----------

async def test_plan_crud(client, headers_for, admin):
    headers = headers_for(admin)
    resp = await client.post(
        f"{ADMIN}/plans",
        json={"name": "Starter", "price": "19.90", "currency": "usd", "billing_cycle": "QUARTERLY"},
        headers=headers,
    )
    assert resp.status_code == 201
    plan = resp.json()["data"]
    assert plan["price"] == 19.9
    assert plan["currency"] == "USD"
    assert plan["billing_cycle"] == "QUARTERLY"

    resp = await client.patch(f"{ADMIN}/plans/{plan['id']}", json={"is_active": False}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["is_active"] is False

    resp = await client.get(f"{ADMIN}/plans", headers=headers)
    assert [p["name"] for p in resp.json()["data"]] == ["Starter"]

    resp = await client.delete(f"{ADMIN}/plans/{plan['id']}", headers=headers)
    assert resp.status_code == 200

    resp = await client.patch(f"{ADMIN}/plans/{plan['id']}", json={"name": "x"}, headers=headers)
    assert resp.status_code == 404


async def test_create_plan_rejects_negative_price(client, headers_for, admin):
    resp = await client.post(f"{ADMIN}/plans", json={"name": "Bad", "price": "-1"}, headers=headers_for(admin))
    assert resp.status_code == 422
    assert resp.json()["code"] == "INVALID_INPUT"


async def test_delete_plan_in_use(client, headers_for, admin, user, plan, make_order):
    await make_order(user, plan)
    resp = await client.delete(f"{ADMIN}/plans/{plan.id}", headers=headers_for(admin))
    assert resp.status_code == 400
    assert resp.json()["code"] == "PLAN_IN_USE"


async def test_deleted_user_token_cannot_create_orders(client, headers_for, admin, user, plan, make_order):
    await make_order(user, plan, OrderStatus.CANCELED)
    old_headers = headers_for(user)

    resp = await client.delete(f"{ADMIN}/users/{user.id}", headers=headers_for(admin))
    assert resp.status_code == 200

    resp = await client.post("/api/v1/account/orders", json={"plan_id": plan.id}, headers=old_headers)
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"

    resp = await client.get(f"{ADMIN}/orders", headers=headers_for(admin))
    assert resp.status_code == 200
    assert resp.json()["data"] == []
