import json

import pytest


@pytest.fixture
def alice_profile(api, alice):
    return api.profile(alice)


@pytest.mark.parametrize("url", [
    "/admin/dashboard",
    "/admin/users",
    "/admin/reviews/pending",
    "/admin/products",
])
def test_admin_endpoints_reject_users(api, alice, url):
    assert api.client.get(url).status_code == 401
    assert api.client.get(url, headers=alice).status_code == 403


def test_dashboard_counts(api, alice, alice_profile, bob, admin_headers, phone):
    first = api.order(alice, [{"product_id": phone["id"], "quantity": 3}]).get_json()
    api.order(alice, [{"product_id": phone["id"], "quantity": 1}])
    api.client.patch(f"/admin/orders/{first['id']}/status", json={"status": "Delivered"}, headers=admin_headers)

    response = api.client.get("/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    stats = response.get_json()
    assert stats["total_users"] == 3
    assert stats["total_customers"] == 1
    assert stats["total_products"] == 1
    assert stats["total_orders"] == 2
    assert stats["pending_orders"] == 1
    assert stats["total_revenue"] == "1799.97"
    assert stats["last_updated"]


def test_dashboard_on_empty_store(api, admin_headers):
    stats = api.client.get("/admin/dashboard", headers=admin_headers).get_json()
    assert stats["total_users"] == 1
    assert stats["total_orders"] == 0
    assert stats["total_revenue"] == "0.00"


def test_update_user_role(api, alice, admin_headers):
    users = api.client.get("/admin/users", headers=admin_headers).get_json()
    alice_id = next(u["id"] for u in users if u["username"] == "alice")
    url = f"/admin/users/{alice_id}/role"

    invalid = api.client.patch(url, json={"role": "Superuser"}, headers=admin_headers)
    assert invalid.status_code == 400
    assert invalid.get_json()["error"] == "Role must be either 'Admin' or 'User'."
    assert api.client.patch(url, json={"role": "admin"}, headers=admin_headers).status_code == 400
    assert api.client.patch("/admin/users/999/role", json={"role": "Admin"},
                            headers=admin_headers).status_code == 404
    assert api.client.patch(url, json={"role": "Admin"}, headers=alice).status_code == 403

    assert api.client.patch(url, json={"role": "Admin"}, headers=admin_headers).status_code == 204

    # The old token still carries the old role
    assert api.client.get("/admin/dashboard", headers=alice).status_code == 403
    promoted = api.login("alice")
    assert api.client.get("/admin/dashboard", headers=promoted).status_code == 200


def test_users_hide_password_hash(api, alice, admin_headers):
    users = api.client.get("/admin/users", headers=admin_headers).get_json()
    assert sorted(u["username"] for u in users) == ["admin", "alice"]
    assert all("password_hash" not in u for u in users)


def test_pending_reviews_and_bulk_approve(api, alice, alice_profile, bob, admin_headers, phone):
    api.profile(bob)
    first = api.client.post(f"/products/{phone['id']}/reviews", json={"rating": 5}, headers=alice).get_json()
    second = api.client.post(f"/products/{phone['id']}/reviews", json={"rating": 3}, headers=bob).get_json()

    pending = api.client.get("/admin/reviews/pending", headers=admin_headers).get_json()
    assert [r["id"] for r in pending] == [second["id"], first["id"]]
    assert all(r["product_name"] == "Phone" for r in pending)

    response = api.client.patch("/admin/reviews/bulk-approve",
                                json={"review_ids": [first["id"], second["id"], 999]},
                                headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json() == {"updated_count": 2}
    assert api.client.get("/admin/reviews/pending", headers=admin_headers).get_json() == []
    assert len(api.client.get(f"/products/{phone['id']}/reviews").get_json()) == 2

    # approve=false takes them back off the storefront
    response = api.client.patch("/admin/reviews/bulk-approve",
                                json={"review_ids": [first["id"]], "approve": False},
                                headers=admin_headers)
    assert response.get_json() == {"updated_count": 1}
    assert [r["id"] for r in api.client.get("/admin/reviews/pending", headers=admin_headers).get_json()] == [first["id"]]


def test_bulk_approve_rejects_bad_ids(api, admin_headers):
    response = api.client.patch("/admin/reviews/bulk-approve", json={"review_ids": ["x"]}, headers=admin_headers)
    assert response.status_code == 400
    response = api.client.patch("/admin/reviews/bulk-approve", json={"review_ids": [0]}, headers=admin_headers)
    assert response.status_code == 400
    response = api.client.patch("/admin/reviews/bulk-approve", json={"review_ids": []}, headers=admin_headers)
    assert response.get_json() == {"updated_count": 0}


def test_admin_products_include_inactive(api, admin_headers, electronics, phone):
    api.product(admin_headers, electronics["id"], "Retired", "1.00", 0, active=False)

    public = api.client.get("/products").get_json()
    assert [p["name"] for p in public] == ["Phone"]

    everything = api.client.get("/admin/products", headers=admin_headers).get_json()
    assert sorted(p["name"] for p in everything) == ["Phone", "Retired"]


def test_order_status_patch(api, alice, alice_profile, admin_headers, phone):
    order = api.order(alice, [{"product_id": phone["id"], "quantity": 1}]).get_json()
    url = f"/admin/orders/{order['id']}/status"

    assert api.client.patch(url, json={"status": "Shipped"}, headers=alice).status_code == 403
    assert api.client.patch(url, json={"status": "Lost"}, headers=admin_headers).status_code == 400
    assert api.client.patch("/admin/orders/999/status", json={"status": "Shipped"},
                            headers=admin_headers).status_code == 404

    assert api.client.patch(url, json={"status": "Shipped"}, headers=admin_headers).status_code == 204
    assert api.client.get(f"/orders/{order['id']}", headers=alice).get_json()["status"] == "Shipped"


def test_admin_order_listing(api, alice, alice_profile, admin_headers, phone):
    first = api.order(alice, [{"product_id": phone["id"], "quantity": 1}]).get_json()
    api.order(alice, [{"product_id": phone["id"], "quantity": 2}])
    api.client.patch(f"/admin/orders/{first['id']}/status", json={"status": "Shipped"}, headers=admin_headers)

    assert api.client.get("/admin/orders", headers=alice).status_code == 403

    response = api.client.get("/admin/orders", query_string={"page_size": 1}, headers=admin_headers)
    assert response.status_code == 200
    assert len(response.get_json()) == 1
    meta = json.loads(response.headers["X-Pagination"])
    assert meta["total_item_count"] == 2
    assert meta["total_page_count"] == 2

    shipped = api.client.get("/admin/orders", query_string={"status": "Shipped"}, headers=admin_headers).get_json()
    assert [o["id"] for o in shipped] == [first["id"]]
    assert api.client.get("/admin/orders", query_string={"status": "Lost"},
                          headers=admin_headers).status_code == 400
