"""
Integration Tests: JSON API

Drives the FastAPI app end to end with signed identity tokens against a
file-backed SQLite database, covering:
- Identity handling (missing, forged and valid tokens)
- Catalog browsing
- Cart and checkout flow with HTTP status mapping
- Admin catalog routes behind the admin policy
"""

import time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

import config
from app import app
from models.base import Base
from models.product import Product
from utils.identity_validator import sign_identity_claims
from utils.permission_utils import AdminPolicy, get_admin_policy
from web.dependencies import IDENTITY_HEADER, get_session


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "api.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return path


@pytest.fixture
def seed_product(db_path):
    def seed(name="Desk Lamp", price=2500, stock_quantity=5, is_active=True, category="home") -> str:
        engine = create_engine(f"sqlite:///{db_path}")
        with Session(engine) as session:
            product = Product(name=name, price=price, stock_quantity=stock_quantity, is_active=is_active,
                              category=category)
            session.add(product)
            session.commit()
            product_id = product.id
        engine.dispose()
        return product_id

    return seed


@pytest.fixture
def client(db_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_session():
        async with maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_admin_policy] = lambda: AdminPolicy(role_names=frozenset({"admin"}))
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def identity(sub="clerk_user_1", **claims) -> dict:
    token = sign_identity_claims({"sub": sub, "auth_date": int(time.time()), **claims},
                                 config.IDENTITY_SHARED_SECRET)
    return {IDENTITY_HEADER: token}


SHIPPING = {"shipping_name": "Jane Doe", "shipping_address": "1 Main Street", "shipping_phone": "555-0100"}


class TestIdentity:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_cart_without_token_unauthenticated(self, client):
        response = client.get("/api/cart")

        assert response.status_code == 401
        assert response.json()["error_code"] == "Unauthenticated"

    def test_forged_token_unauthenticated(self, client):
        forged = sign_identity_claims({"sub": "clerk_user_1", "auth_date": int(time.time())},
                                      "not_the_real_secret_0123456789abcdef")

        response = client.get("/api/cart", headers={IDENTITY_HEADER: forged})

        assert response.status_code == 401

    def test_me_resolves_same_user(self, client):
        first = client.get("/api/me", headers=identity(name="Jane"))
        second = client.get("/api/me", headers=identity())

        assert first.status_code == 200
        assert first.json()["data"] == second.json()["data"]


class TestCatalog:

    def test_list_products(self, client, seed_product):
        seed_product(name="Desk Lamp")
        seed_product(name="Hidden", is_active=False)

        body = client.get("/api/products").json()

        assert body["success"] is True
        assert [p["name"] for p in body["data"]["items"]] == ["Desk Lamp"]
        assert body["data"]["total_pages"] == 1

    def test_invalid_page_rejected(self, client):
        assert client.get("/api/products", params={"page": 0}).status_code == 422

    def test_unknown_product_not_found(self, client):
        response = client.get("/api/products/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NotFound"


class TestCartAndCheckout:

    def test_add_to_cart_and_checkout(self, client, seed_product):
        product_id = seed_product(price=2500, stock_quantity=5)
        headers = identity()

        added = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 2}, headers=headers)
        assert added.status_code == 201

        summary = client.get("/api/cart/summary", headers=headers).json()["data"]
        assert summary["total_amount"] == 5000

        order = client.post("/api/orders", json=SHIPPING, headers=headers)
        assert order.status_code == 201
        order_data = order.json()["data"]
        assert order_data["status"] == "pending"
        assert order_data["total_amount"] == 5000

        orders = client.get("/api/orders", headers=headers).json()["data"]
        assert [o["id"] for o in orders] == [order_data["id"]]

    def test_out_of_stock_conflict(self, client, seed_product):
        product_id = seed_product(stock_quantity=1)

        response = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 3},
                               headers=identity())

        assert response.status_code == 409
        assert response.json()["error_code"] == "OutOfStock"

    def test_invalid_quantity(self, client, seed_product):
        product_id = seed_product()

        response = client.post("/api/cart/items", json={"product_id": product_id, "quantity": 0},
                               headers=identity())

        assert response.status_code == 400
        assert response.json()["error_code"] == "InvalidQuantity"

    def test_checkout_empty_cart(self, client):
        response = client.post("/api/orders", json=SHIPPING, headers=identity())

        assert response.status_code == 400
        assert response.json()["error_code"] == "EmptyCart"

    def test_checkout_blank_shipping(self, client, seed_product):
        product_id = seed_product()
        headers = identity()
        client.post("/api/cart/items", json={"product_id": product_id}, headers=headers)

        response = client.post("/api/orders", json={**SHIPPING, "shipping_address": "  "}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "InvalidShippingInfo"
        assert response.json()["details"]["field"] == "address"

    def test_cancel_then_cancel_again(self, client, seed_product):
        product_id = seed_product()
        headers = identity()
        client.post("/api/cart/items", json={"product_id": product_id}, headers=headers)
        order_id = client.post("/api/orders", json=SHIPPING, headers=headers).json()["data"]["id"]

        cancelled = client.post(f"/api/orders/{order_id}/cancel", headers=headers)
        again = client.post(f"/api/orders/{order_id}/cancel", headers=headers)

        assert cancelled.json()["data"]["status"] == "cancelled"
        assert again.status_code == 409
        assert again.json()["error_code"] == "InvalidTransition"

    def test_other_users_order_not_found(self, client, seed_product):
        product_id = seed_product()
        owner = identity(sub="owner")
        client.post("/api/cart/items", json={"product_id": product_id}, headers=owner)
        order_id = client.post("/api/orders", json=SHIPPING, headers=owner).json()["data"]["id"]

        response = client.get(f"/api/orders/{order_id}", headers=identity(sub="intruder"))

        assert response.status_code == 404


class TestAdminRoutes:

    def test_customer_forbidden(self, client):
        response = client.post("/api/admin/products", json={"name": "Mug", "price": 900}, headers=identity())

        assert response.status_code == 403
        assert response.json()["error_code"] == "Forbidden"

    def test_admin_manages_product(self, client):
        headers = identity(sub="admin_1", role="admin")

        created = client.post("/api/admin/products", json={"name": "Mug", "price": 900, "stock_quantity": 3},
                              headers=headers)
        assert created.status_code == 201
        product_id = created.json()["data"]["id"]

        stock = client.put(f"/api/admin/products/{product_id}/stock", json={"stock_quantity": 10}, headers=headers)
        assert stock.json()["data"]["stock_quantity"] == 10

        toggled = client.post(f"/api/admin/products/{product_id}/toggle", headers=headers)
        assert toggled.json()["data"] is False
        assert client.get(f"/api/products/{product_id}").status_code == 404

        listed = client.get("/api/admin/products", headers=headers).json()["data"]
        assert listed["total_count"] == 1

        deleted = client.delete(f"/api/admin/products/{product_id}", headers=headers)
        assert deleted.status_code == 200

    def test_invalid_price_rejected(self, client):
        response = client.post("/api/admin/products", json={"name": "Mug", "price": -5},
                               headers=identity(sub="admin_1", role="admin"))

        assert response.status_code == 400
        assert response.json()["error_code"] == "InvalidProductData"
