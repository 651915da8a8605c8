def test_create_and_read_own_profile(api, alice):
    created = api.profile(alice, city="Springfield")
    assert created["username"] == "alice"
    assert created["email"] == "alice@mail.com"
    assert created["first_name"] == "Alice"
    assert created["city"] == "Springfield"
    assert created["number_of_orders"] == 0

    for url in ("/customers/profile", "/customers/my-profile"):
        response = api.client.get(url, headers=alice)
        assert response.status_code == 200
        assert response.get_json()["id"] == created["id"]


def test_profile_missing(api, alice):
    response = api.client.get("/customers/profile", headers=alice)
    assert response.status_code == 404
    assert response.get_json()["error"] == "Customer profile not found. Please create a customer profile first."
    assert api.client.put("/customers/profile", json={"city": "Paris"}, headers=alice).status_code == 404


def test_second_profile_is_a_conflict(api, alice):
    api.profile(alice)
    response = api.client.post("/customers/profile", json={"city": "Paris"}, headers=alice)
    assert response.status_code == 409


def test_update_profile_keeps_blank_fields(api, alice):
    api.profile(alice, phone="555-0100", city="Springfield", country="US")
    response = api.client.put("/customers/profile", json={"phone": "", "city": "  Paris ", "country": None},
                              headers=alice)
    assert response.status_code == 204

    body = api.client.get("/customers/profile", headers=alice).get_json()
    assert body["phone"] == "555-0100"
    assert body["city"] == "Paris"
    assert body["country"] == "US"


def test_profile_access_is_owner_or_admin(api, alice, bob, admin_headers):
    profile = api.profile(alice)
    url = f"/customers/{profile['id']}"

    assert api.client.get(url, headers=alice).status_code == 200
    assert api.client.get(url, headers=bob).status_code == 403
    assert api.client.get(url, headers=admin_headers).status_code == 200
    assert api.client.get("/customers/999", headers=admin_headers).status_code == 404


def test_list_profiles_is_admin_only(api, alice, bob, admin_headers):
    api.profile(alice)
    api.profile(bob)
    assert api.client.get("/customers", headers=alice).status_code == 403

    profiles = api.client.get("/customers", headers=admin_headers).get_json()
    assert sorted(p["username"] for p in profiles) == ["alice", "bob"]


def test_delete_profile_cascades_to_orders(app, api, alice, admin_headers, phone):
    profile = api.profile(alice)
    order = api.order(alice, [{"product_id": phone["id"], "quantity": 1}]).get_json()

    with_orders = api.client.get(f"/customers/{profile['id']}", query_string={"include_orders": "true"},
                                 headers=alice).get_json()
    assert [o["id"] for o in with_orders["orders"]] == [order["id"]]
    assert with_orders["number_of_orders"] == 1

    assert api.client.delete(f"/customers/{profile['id']}", headers=alice).status_code == 403
    assert api.client.delete(f"/customers/{profile['id']}", headers=admin_headers).status_code == 204
    assert api.client.get(f"/orders/{order['id']}", headers=admin_headers).status_code == 404

    from storefront.models import models
    with app.app_context():
        assert models.OrderItem.count() == 0
