"""Tests for the HTTP order, promo-code and health endpoints."""

from decimal import Decimal

import pytest


@pytest.fixture
def shop(make_user, make_product, make_promo):
    return {
        "customer": make_user("customer"),
        "other": make_user("customer"),
        "rider": make_user("rider"),
        "admin": make_user("admin"),
        "pizza": make_product("Pizza", "100.00", stock=5),
        "last": make_product("Last one", "10.00", stock=1),
        "promo": make_promo("SAVE10"),
    }


def place(client, headers, product, quantity=1, **extra):
    body = {
        "items": [{"product_id": product.id, "quantity": quantity, "price": str(product.price)}],
        "delivery_address": "Main St 1",
        **extra,
    }
    return client.post("/orders/", json=body, headers=headers)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/orders/my")
        assert response.status_code == 401
        assert response.json() == {"error": "Access denied. No token provided."}

    def test_unknown_token(self, client):
        response = client.get("/orders/my", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_wrong_role(self, client, shop, login):
        response = client.get("/orders/admin/all", headers=login(shop["customer"]))
        assert response.status_code == 403
        assert "error" in response.json()


class TestCreateOrder:
    def test_create_with_promo(self, client, shop, login, dispatch):
        response = place(client, login(shop["customer"]), shop["pizza"], 2, promo_code_id=shop["promo"].id, discount_amount="99")

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order created successfully"
        assert Decimal(data["discount_applied"]) == Decimal("20.00")
        assert data["order"]["id"] == data["order_id"]
        assert data["order"]["status"] == "pending"
        assert Decimal(data["order"]["total_price"]) == Decimal("180.00")
        assert Decimal(data["order"]["discount_amount"]) == Decimal("20.00")
        assert dispatch.sent == [(data["order_id"], shop["customer"].id, "pending")]

    def test_empty_items(self, client, shop, login):
        response = client.post(
            "/orders/", json={"items": [], "delivery_address": "Main St 1"}, headers=login(shop["customer"])
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Order must contain items"}

    def test_missing_address_is_400(self, client, shop, login):
        response = client.post(
            "/orders/",
            json={"items": [{"product_id": shop["pizza"].id, "quantity": 1, "price": "100.00"}]},
            headers=login(shop["customer"]),
        )
        assert response.status_code == 400
        assert "delivery_address" in response.json()["error"]

    def test_insufficient_stock_is_400(self, client, shop, login):
        response = place(client, login(shop["customer"]), shop["last"], 2)
        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["error"]

    def test_unknown_product_is_404(self, client, shop, login):
        response = client.post(
            "/orders/",
            json={"items": [{"product_id": 999, "quantity": 1, "price": "1.00"}], "delivery_address": "x"},
            headers=login(shop["customer"]),
        )
        assert response.status_code == 404

    def test_promo_reuse_rejected(self, client, shop, login):
        headers = login(shop["customer"])
        assert place(client, headers, shop["pizza"], promo_code_id=shop["promo"].id).status_code == 201

        response = place(client, headers, shop["pizza"], promo_code_id=shop["promo"].id)
        assert response.status_code == 400
        assert response.json() == {"error": "You have already used this promo code"}

    def test_rider_cannot_order(self, client, shop, login):
        assert place(client, login(shop["rider"]), shop["pizza"]).status_code == 403


class TestReadOrders:
    def test_access_control(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]

        own = client.get(f"/orders/{order_id}", headers=login(shop["customer"]))
        assert own.status_code == 200
        assert own.json()["order"]["id"] == order_id
        assert own.json()["items"][0]["product_name"] == "Pizza"

        assert client.get(f"/orders/{order_id}", headers=login(shop["other"])).status_code == 403
        assert client.get(f"/orders/{order_id}", headers=login(shop["rider"])).status_code == 403
        assert client.get(f"/orders/{order_id}", headers=login(shop["admin"])).status_code == 200

        client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["rider"].id}, headers=login(shop["admin"]))
        assert client.get(f"/orders/{order_id}", headers=login(shop["rider"])).status_code == 200

    def test_missing_order(self, client, shop, login):
        response = client.get("/orders/4040", headers=login(shop["admin"]))
        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_my_orders(self, client, shop, login):
        place(client, login(shop["customer"]), shop["pizza"])
        place(client, login(shop["other"]), shop["pizza"])

        response = client.get("/orders/my", headers=login(shop["customer"]))
        assert response.status_code == 200
        assert [o["user_id"] for o in response.json()] == [shop["customer"].id]

    def test_admin_filter(self, client, shop, login):
        place(client, login(shop["customer"]), shop["pizza"])
        place(client, login(shop["other"]), shop["pizza"])

        response = client.get(
            "/orders/admin/filter",
            params={"customer_id": shop["other"].id, "date": "today", "status": "pending"},
            headers=login(shop["admin"]),
        )
        assert response.status_code == 200
        assert [o["user_id"] for o in response.json()] == [shop["other"].id]

    def test_admin_filter_bad_date(self, client, shop, login):
        response = client.get("/orders/admin/filter", params={"date": "forever"}, headers=login(shop["admin"]))
        assert response.status_code == 400


class TestTransitions:
    def test_rider_flow_over_http(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]
        admin, rider = login(shop["admin"]), login(shop["rider"])

        assigned = client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["rider"].id}, headers=admin)
        assert assigned.status_code == 200
        assert assigned.json() == {"message": "Rider assigned successfully", "order_id": order_id, "status": "assigned"}

        assert client.put(f"/orders/rider/start/{order_id}", headers=rider).json()["status"] == "rider_started"
        assert client.put(f"/orders/rider/picked/{order_id}", headers=rider).json()["status"] == "picked_up"
        delivered = client.put(f"/orders/rider/delivered/{order_id}", headers=rider)
        assert delivered.json() == {"message": "Order delivered", "order_id": order_id, "status": "delivered"}

        refunded = client.put(f"/orders/admin/refund/{order_id}", headers=admin)
        assert refunded.json()["status"] == "refunded"

        rider_list = client.get("/orders/rider/my", headers=rider)
        assert [o["id"] for o in rider_list.json()] == [order_id]

    def test_other_rider_denied(self, client, shop, login, make_user):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]
        client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["rider"].id}, headers=login(shop["admin"]))

        response = client.put(f"/orders/rider/start/{order_id}", headers=login(make_user("rider")))
        assert response.status_code == 403
        assert response.json() == {"error": "Order not assigned to this rider"}

    def test_legacy_status_route(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]
        client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["rider"].id}, headers=login(shop["admin"]))

        response = client.put(f"/orders/status/{order_id}", json={"status": "rider_started"}, headers=login(shop["rider"]))
        assert response.status_code == 200
        assert response.json()["status"] == "rider_started"

        skipped = client.put(f"/orders/status/{order_id}", json={"status": "delivered"}, headers=login(shop["rider"]))
        assert skipped.status_code == 400

    def test_cancel_clears_rider(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]
        admin = login(shop["admin"])
        client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["rider"].id}, headers=admin)

        response = client.put(f"/orders/admin/cancel/{order_id}", headers=admin)
        assert response.json() == {"message": "Order cancelled successfully", "order_id": order_id, "status": "cancelled"}

        detail = client.get(f"/orders/{order_id}", headers=admin).json()
        assert detail["order"]["rider_id"] is None

    def test_override(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]

        response = client.put(
            f"/orders/admin/status/{order_id}", json={"status": "delivered", "reason": "phone order"}, headers=login(shop["admin"])
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Order status updated", "order_id": order_id, "new_status": "delivered"}

        missing = client.put(f"/orders/admin/status/{order_id}", json={}, headers=login(shop["admin"]))
        assert missing.status_code == 400
        assert missing.json() == {"error": "Status is required"}

    def test_assign_unknown_rider(self, client, shop, login):
        order_id = place(client, login(shop["customer"]), shop["pizza"]).json()["order_id"]

        response = client.put(f"/orders/assign/{order_id}", json={"rider_id": shop["other"].id}, headers=login(shop["admin"]))
        assert response.status_code == 404
        assert response.json() == {"error": "Rider not found"}


class TestPromoCodesApi:
    def test_validate_preview(self, client, shop, login):
        response = client.post(
            "/promo-codes/validate", json={"code": "save10", "cart_total": "200.00"}, headers=login(shop["customer"])
        )
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert Decimal(data["discount_amount"]) == Decimal("20.00")
        assert Decimal(data["final_amount"]) == Decimal("180.00")

    def test_validate_does_not_consume(self, client, shop, login):
        headers = login(shop["customer"])
        for _ in range(2):
            response = client.post("/promo-codes/validate", json={"code": "SAVE10", "cart_total": "50"}, headers=headers)
            assert response.status_code == 200

    def test_validate_unknown_code_is_404(self, client, shop, login):
        response = client.post("/promo-codes/validate", json={"code": "NOPE", "cart_total": "50"}, headers=login(shop["customer"]))
        assert response.status_code == 404
        assert response.json() == {"error": "Invalid or expired promo code"}

    def test_admin_create_list_deactivate(self, client, shop, login):
        admin = login(shop["admin"])

        created = client.post(
            "/promo-codes/", json={"code": "flat5", "discount_type": "fixed", "discount_value": "5"}, headers=admin
        )
        assert created.status_code == 201
        assert created.json()["code"] == "FLAT5"

        duplicate = client.post(
            "/promo-codes/", json={"code": "FLAT5", "discount_type": "fixed", "discount_value": "5"}, headers=admin
        )
        assert duplicate.status_code == 400

        codes = {p["code"] for p in client.get("/promo-codes/", headers=admin).json()}
        assert codes == {"SAVE10", "FLAT5"}

        deactivated = client.put(f"/promo-codes/{created.json()['id']}/deactivate", headers=admin)
        assert deactivated.json()["is_active"] is False

    def test_customer_cannot_create(self, client, shop, login):
        response = client.post(
            "/promo-codes/", json={"code": "X", "discount_type": "fixed", "discount_value": "5"}, headers=login(shop["customer"])
        )
        assert response.status_code == 403

    def test_admin_update_and_delete(self, client, shop, login):
        admin = login(shop["admin"])
        created = client.post(
            "/promo-codes/", json={"code": "temp", "discount_type": "fixed", "discount_value": "5"}, headers=admin
        ).json()

        updated = client.put(f"/promo-codes/{created['id']}", json={"code": "later", "max_discount": "3"}, headers=admin)
        assert updated.status_code == 200
        assert updated.json()["code"] == "LATER"
        assert Decimal(updated.json()["max_discount"]) == Decimal("3")
        assert Decimal(updated.json()["discount_value"]) == Decimal("5")

        clash = client.put(f"/promo-codes/{created['id']}", json={"code": "save10"}, headers=admin)
        assert clash.status_code == 400
        assert clash.json() == {"error": "Promo code already exists"}

        deleted = client.delete(f"/promo-codes/{created['id']}", headers=admin)
        assert deleted.json() == {"message": "Promo code deleted successfully"}
        assert client.delete(f"/promo-codes/{created['id']}", headers=admin).status_code == 404

    def test_used_code_cannot_be_deleted(self, client, shop, login):
        assert place(client, login(shop["customer"]), shop["pizza"], promo_code_id=shop["promo"].id).status_code == 201

        response = client.delete(f"/promo-codes/{shop['promo'].id}", headers=login(shop["admin"]))
        assert response.status_code == 400
        assert response.json() == {"error": "Promo code has already been used, deactivate it instead"}

    def test_validate_trims_code(self, client, shop, login):
        response = client.post(
            "/promo-codes/validate", json={"code": " save10 ", "cart_total": "100"}, headers=login(shop["customer"])
        )
        assert response.status_code == 200
        assert response.json()["code"] == "SAVE10"
