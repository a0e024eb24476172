"""Order history and news feed."""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from storefront.core.security import create_access_token
from storefront.database import Base, get_db
from storefront.main import app
from storefront.models.news import News
from storefront.models.order import Order, OrderItem

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_db():
    engine = create_async_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with SessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield SessionLocal
    app.dependency_overrides.clear()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


def _headers(user_id: str, role: str = None) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role=role)}"}


def _order(order_id: str, user_id: str, day: int, total: str) -> Order:
    return Order(
        id=order_id,
        user_id=user_id,
        total_amount_eur=Decimal(total),
        status="paid",
        created_at=datetime(2026, 10, day, 12, 0, tzinfo=timezone.utc),
        shipping_first_name="Erika",
        shipping_last_name="Muster",
        shipping_street="Hauptstr.",
        shipping_house_number="5",
        shipping_postal_code="10115",
        shipping_city="Berlin",
        shipping_country="DE",
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_orders_newest_first_with_items(test_db):
    async with test_db() as session:
        session.add_all([
            _order("order-old", "buyer", 1, "20.00"),
            _order("order-new", "buyer", 3, "45.50"),
            _order("order-other", "someone-else", 2, "99.00"),
        ])
        await session.flush()
        session.add_all([
            OrderItem(id="item-1", order_id="order-new", product_id="prod-a", quantity=2, price_eur=Decimal("15.25")),
            OrderItem(id="item-2", order_id="order-new", product_id="prod-b", quantity=1, price_eur=Decimal("15.00")),
            OrderItem(id="item-3", order_id="order-old", product_id="prod-c", quantity=1, price_eur=Decimal("20.00")),
        ])
        await session.commit()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.get("/api/orders", headers=_headers("buyer"))
        assert r.status_code == 200, r.text
        orders = r.json()["orders"]

    assert [o["id"] for o in orders] == ["order-new", "order-old"]
    assert orders[0]["total_amount_eur"] == pytest.approx(45.5)
    assert {i["product_id"] for i in orders[0]["items"]} == {"prod-a", "prod-b"}
    assert orders[1]["items"] == [{"id": "item-3", "product_id": "prod-c", "quantity": 1, "price_eur": 20.0}]
    assert orders[0]["shipping_address"] == "Erika Muster, Hauptstr. 5, 10115 Berlin, DE"


@pytest.mark.asyncio
async def test_orders_empty_for_new_user(test_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.get("/api/orders", headers=_headers("nobody"))
        assert r.status_code == 200, r.text
        assert r.json() == {"success": True, "orders": []}


@pytest.mark.asyncio
async def test_orders_require_auth(test_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.get("/api/orders")
        assert r.status_code == 401, r.text


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_publishes_news(test_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.post(
            "/api/news",
            json={"content": "**Neu** im Shop: *Monero* Auszahlungen"},
            headers=_headers("editor", role="admin"),
        )
        assert r.status_code == 201, r.text
        assert r.json()["news"]["author_id"] == "editor"

        r = await client.get("/api/news")
        assert r.status_code == 200, r.text
        news = r.json()["news"]
        assert len(news) == 1
        assert news[0]["content"] == "**Neu** im Shop: *Monero* Auszahlungen"


@pytest.mark.asyncio
async def test_blank_news_is_rejected(test_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.post("/api/news", json={"content": "   \n"}, headers=_headers("editor", role="admin"))
        assert r.status_code == 400, r.text
        assert r.json() == {"error": "Content is required"}

    async with test_db() as session:
        assert list(await session.scalars(select(News))) == []


@pytest.mark.asyncio
async def test_regular_user_cannot_publish_news(test_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        r = await client.post("/api/news", json={"content": "hi"}, headers=_headers("customer"))
        assert r.status_code == 403, r.text
