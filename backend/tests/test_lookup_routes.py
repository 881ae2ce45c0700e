from datetime import timedelta
import pytest
from app.core.security import create_access_token
from app.models.product import Product


def bearer(user_name, expires_delta=None):
    token = create_access_token({"sub": user_name}, expires_delta=expires_delta)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def product_id(session_factory):
    with session_factory() as db:
        product = Product(
            name="Hades",
            old_price=79.9,
            price=47.49,
            platform="PC",
            image_url="/static/img/hades.jpg",
        )
        db.add(product)
        db.commit()
        return product.id


class TestUserLookup:
    def test_padded_user_name_in_path(self, client, register):
        register()

        response = client.get("/auth/user/%20alice%20", headers=bearer("alice"))

        assert response.status_code == 200
        assert response.json()["userName"] == "alice"

    def test_user_reads_own_record(self, client, register):
        register()

        response = client.get("/auth/user/alice", headers=bearer("alice"))

        assert response.status_code == 200
        body = response.json()
        assert body["userName"] == "alice"
        assert body["telefone"] == "+55 11 91234-5678"
        assert "hashed_password" not in body

    def test_lookup_is_idempotent(self, client, register):
        register()

        first = client.get("/auth/user/alice", headers=bearer("alice"))
        second = client.get("/auth/user/alice", headers=bearer("alice"))

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()

    def test_requires_a_token(self, client, register):
        register()

        response = client.get("/auth/user/alice")

        assert response.status_code == 401

    def test_expired_token_is_rejected(self, client, register):
        register()

        response = client.get(
            "/auth/user/alice", headers=bearer("alice", expires_delta=timedelta(seconds=-1))
        )

        assert response.status_code == 401

    def test_token_for_deleted_or_unknown_user_is_rejected(self, client):
        response = client.get("/auth/user/ghost", headers=bearer("ghost"))

        assert response.status_code == 401

    def test_other_users_are_forbidden(self, client, register):
        register()
        register(userName="bob", email="bob@example.com")

        response = client.get("/auth/user/alice", headers=bearer("bob"))

        assert response.status_code == 403

    def test_admin_reads_any_user(self, client, register, admin_user):
        register()

        response = client.get("/auth/user/alice", headers=bearer(admin_user))

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    def test_unknown_user_is_404_for_admin(self, client, admin_user):
        response = client.get("/auth/user/nobody", headers=bearer(admin_user))

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_remember_me_cookie_authenticates(self, client, register):
        register()
        client.post(
            "/auth/login",
            json={"userName": "alice", "password": "s3cret!", "rememberMe": True}
        )

        # TestClient keeps the jwt cookie from the login response
        response = client.get("/auth/user/alice")

        assert response.status_code == 200
        assert response.json()["userName"] == "alice"


class TestProductLookup:
    def test_existing_product(self, client, product_id):
        response = client.get(f"/auth/product/{product_id}")

        assert response.status_code == 200
        assert response.json() == {
            "productId": product_id,
            "productName": "Hades",
            "oldPrice": 79.9,
            "price": 47.49,
            "plataform": "PC",
            "imagemUrl": "/static/img/hades.jpg",
        }

    def test_repeated_reads_match(self, client, product_id):
        first = client.get(f"/auth/product/{product_id}")
        second = client.get(f"/auth/product/{product_id}")

        assert first.json() == second.json()

    def test_missing_product(self, client):
        response = client.get("/auth/product/9999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    def test_product_lookup_needs_no_auth(self, client, product_id):
        assert client.get(f"/auth/product/{product_id}").status_code == 200


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_product_page_is_served(client):
    response = client.get("/static/produto.html")

    assert response.status_code == 200
    assert "add-to-cart" in response.text
