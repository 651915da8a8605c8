import pytest

from storefront import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "Storefront"
DEFAULT_PASSWORD = "secret123"


def make_app(tmp_path, **overrides):
    config = {"DATABASE_URI": f"sqlite:///{tmp_path / 'storefront.db'}"}
    config.update(overrides)
    return create_app("testing", config_overrides=config)


@pytest.fixture
def app(tmp_path):
    return make_app(tmp_path)


@pytest.fixture
def decrementing_app(tmp_path):
    return make_app(tmp_path, DECREMENT_STOCK_ON_ORDER=True)


class Api:
    """Thin wrapper over the test client for the calls most tests need."""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def auth(token):
        return {"Authorization": f"Bearer {token}"}

    def register(self, username, email, password=DEFAULT_PASSWORD, first_name="Alice", last_name="Smith"):
        return self.client.post("/authentication/register", json={
            "username": username,
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
        })

    def token(self, username, password=DEFAULT_PASSWORD):
        response = self.client.post("/authentication/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.get_json()
        return response.get_json()["token"]

    def login(self, username, password=DEFAULT_PASSWORD):
        return self.auth(self.token(username, password))

    def admin(self):
        return self.login(ADMIN_USERNAME, ADMIN_PASSWORD)

    def user(self, username, email, **kwargs):
        response = self.register(username, email, **kwargs)
        assert response.status_code == 201, response.get_json()
        return self.login(username, kwargs.get("password", DEFAULT_PASSWORD))

    def profile(self, headers, **fields):
        payload = {"phone": "555-0100", "address": "1 Main St", "city": "Springfield",
                   "postal_code": "12345", "country": "US"}
        payload.update(fields)
        response = self.client.post("/customers/profile", json=payload, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    def category(self, headers, name="Electronics", **fields):
        response = self.client.post("/categories", json={"name": name, **fields}, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    def product(self, headers, category_id, name="Phone", price="599.99", stock_quantity=10, **fields):
        payload = {"name": name, "price": price, "stock_quantity": stock_quantity, "category_id": category_id}
        payload.update(fields)
        response = self.client.post("/products", json=payload, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    def order(self, headers, items, **fields):
        return self.client.post("/orders", json={"items": items, **fields}, headers=headers)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def api(client):
    return Api(client)


@pytest.fixture
def decrementing_api(decrementing_app):
    return Api(decrementing_app.test_client())


@pytest.fixture
def admin_headers(api):
    return api.admin()


@pytest.fixture
def alice(api):
    return api.user("alice", "alice@mail.com")


@pytest.fixture
def bob(api):
    return api.user("bob", "bob@mail.com", first_name="Bob", last_name="Jones")


@pytest.fixture
def electronics(api, admin_headers):
    return api.category(admin_headers, "Electronics", description="Gadgets")


@pytest.fixture
def phone(api, admin_headers, electronics):
    return api.product(admin_headers, electronics["id"], "Phone", "599.99", 10,
                       description="A smart phone", sku="PHN-001")
