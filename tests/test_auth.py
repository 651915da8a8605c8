from flask_jwt_extended import decode_token

from storefront import create_app
from storefront.models import models


def test_register_returns_account_without_secrets(api):
    response = api.register("alice", "alice@mail.com")
    assert response.status_code == 201
    body = response.get_json()
    assert body["username"] == "alice"
    assert body["role"] == "User"
    assert body["active"] is True
    assert "password_hash" not in body
    assert "password" not in body


def test_register_rejects_duplicate_username_or_email(api):
    assert api.register("alice", "alice@mail.com").status_code == 201

    same_name = api.register("ALICE", "other@mail.com")
    assert same_name.status_code == 409
    assert same_name.get_json()["error"] == "Username or email already exists."

    same_email = api.register("alice2", "alice@mail.com")
    assert same_email.status_code == 409


def test_register_validates_input(api):
    response = api.register("al", "not-an-email", password="123")
    assert response.status_code == 400
    details = response.get_json()["details"]
    assert {"username", "email", "password"} <= set(details)


def test_login_issues_bearer_token_with_claims(app, api):
    api.register("alice", "alice@mail.com", first_name="Alice", last_name="Smith")
    response = api.client.post("/authentication/login", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["token_type"] == "Bearer"
    assert body["user"]["username"] == "alice"

    with app.app_context():
        claims = decode_token(body["token"])
    assert claims["sub"] == str(body["user"]["id"])
    assert claims["given_name"] == "Alice"
    assert claims["family_name"] == "Smith"
    assert claims["role"] == "User"


def test_login_records_last_login(app, api):
    api.register("alice", "alice@mail.com")
    api.token("alice")
    with app.app_context():
        account = models.Account.first(username="alice")
    assert account.last_login_at is not None


def test_login_rejects_bad_credentials(api):
    api.register("alice", "alice@mail.com")
    wrong = api.client.post("/authentication/login", json={"username": "alice", "password": "wrong-pass"})
    assert wrong.status_code == 401
    assert wrong.get_json()["error"] == "Invalid username or password."

    unknown = api.client.post("/authentication/login", json={"username": "nobody", "password": "secret123"})
    assert unknown.status_code == 401


def test_protected_endpoint_requires_valid_token(api):
    assert api.client.get("/orders/my-orders").status_code == 401
    garbage = api.client.get("/orders/my-orders", headers=api.auth("not-a-token"))
    assert garbage.status_code == 401
    wrong_scheme = api.client.get("/orders/my-orders", headers={"Authorization": "Basic abc"})
    assert wrong_scheme.status_code == 401


def test_account_read_is_self_or_admin(api, alice, bob, admin_headers):
    accounts = api.client.get("/admin/users", headers=admin_headers).get_json()
    ids = {a["username"]: a["id"] for a in accounts}

    assert api.client.get(f"/authentication/{ids['alice']}", headers=alice).status_code == 200
    assert api.client.get(f"/authentication/{ids['bob']}", headers=alice).status_code == 403
    assert api.client.get(f"/authentication/{ids['bob']}", headers=admin_headers).status_code == 200
    assert api.client.get("/authentication/9999", headers=admin_headers).status_code == 404


def test_delete_account_is_admin_only_and_revokes_access(api, alice, bob, admin_headers):
    accounts = api.client.get("/admin/users", headers=admin_headers).get_json()
    bob_id = next(a["id"] for a in accounts if a["username"] == "bob")

    assert api.client.delete(f"/authentication/{bob_id}", headers=alice).status_code == 403
    assert api.client.delete(f"/authentication/{bob_id}", headers=admin_headers).status_code == 204
    assert api.client.delete(f"/authentication/{bob_id}", headers=admin_headers).status_code == 404
    # Token of a deleted account no longer resolves
    assert api.client.get("/orders/my-orders", headers=bob).status_code == 401


def test_default_admin_is_seeded_once(tmp_path):
    uri = f"sqlite:///{tmp_path / 'seed.db'}"
    first = create_app("testing", config_overrides={"DATABASE_URI": uri})
    create_app("testing", config_overrides={"DATABASE_URI": uri})
    with first.app_context():
        admins = models.Account.get(role="Admin")
    assert len(admins) == 1
    assert admins[0].username == "admin"
