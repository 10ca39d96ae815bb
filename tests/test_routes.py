"""
HTTP surface: status codes, envelopes and admin gating.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from tests.fixtures.sample_data import NOW, admin_token, json_payload

pytestmark = pytest.mark.integration


async def post_book(client, headers, **overrides):
    response = await client.post("/catalog/books/", json=json_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestBooks:

    async def test_empty_listing_is_404(self, client):
        response = await client.get("/catalog/books/")
        assert response.status_code == 404

    async def test_create_requires_a_token(self, client):
        response = await client.post("/catalog/books/", json=json_payload())
        assert response.status_code == 401

    async def test_create_requires_admin_role(self, client):
        headers = {"Authorization": f"Bearer {admin_token(role='customer')}"}
        response = await client.post("/catalog/books/", json=json_payload(), headers=headers)
        assert response.status_code == 403

    async def test_garbage_token_is_401(self, client):
        response = await client.post("/catalog/books/", json=json_payload(), headers={"token": "not-a-jwt"})
        assert response.status_code == 401

    async def test_create_then_list(self, client, admin_headers):
        created = await post_book(client, admin_headers, title="Piranesi", price=Decimal("18.00"))

        response = await client.get("/catalog/books/", params={"search": "piran"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Books fetched successfully"
        assert body["total_count"] == 1
        assert body["books"][0]["id"] == created["id"]
        assert Decimal(str(body["books"][0]["price"])) == Decimal("18.00")

    async def test_duplicate_title_is_409(self, client, admin_headers):
        await post_book(client, admin_headers, title="Twice")
        response = await client.post("/catalog/books/", json=json_payload(title="Twice"), headers=admin_headers)
        assert response.status_code == 409

    async def test_malformed_payload_is_422(self, client, admin_headers):
        payload = json_payload()
        payload["price"] = "-1"
        response = await client.post("/catalog/books/", json=payload, headers=admin_headers)
        assert response.status_code == 422

    async def test_min_price_above_max_is_400(self, client, admin_headers):
        await post_book(client, admin_headers)
        response = await client.get("/catalog/books/", params={"min_price": "5", "max_price": "1"})
        assert response.status_code == 400

    async def test_page_past_the_end_is_an_empty_200(self, client, admin_headers):
        await post_book(client, admin_headers)
        response = await client.get("/catalog/books/", params={"page": 5})
        assert response.status_code == 200
        assert response.json()["books"] == []

    async def test_unknown_sort_carries_a_warning(self, client, admin_headers):
        await post_book(client, admin_headers)
        response = await client.get("/catalog/books/", params={"sort_by": "popularity"})
        assert response.status_code == 200
        assert "popularity" in response.json()["warning"]

    async def test_missing_book_is_404(self, client):
        response = await client.get("/catalog/books/999")
        assert response.status_code == 404

    async def test_update_stock_and_delete(self, client, admin_headers):
        book = await post_book(client, admin_headers)

        response = await client.patch(f"/catalog/books/{book['id']}/stock", json={"quantity": 3}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["stock_quantity"] == 3

        response = await client.delete(f"/catalog/books/{book['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert (await client.get(f"/catalog/books/{book['id']}")).status_code == 404

    async def test_authors(self, client, admin_headers):
        await post_book(client, admin_headers, author="N. K. Jemisin")
        response = await client.get("/catalog/books/authors")
        assert response.json()["data"] == ["N. K. Jemisin"]


class TestCategories:

    async def test_unknown_category_is_400(self, client):
        response = await client.get("/catalog/categories/romance")
        assert response.status_code == 400

    async def test_empty_category_is_200(self, client, admin_headers):
        await post_book(client, admin_headers)
        response = await client.get("/catalog/categories/deals")
        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_coming_soon_and_counts(self, client, admin_headers):
        soon = await post_book(client, admin_headers, published_date=NOW + timedelta(days=20))
        await post_book(client, admin_headers)

        response = await client.get("/catalog/categories/coming-soon")
        assert [b["id"] for b in response.json()["data"]] == [soon["id"]]
        assert response.json()["data"][0]["is_coming_soon"] is True

        counts = (await client.get("/catalog/categories/")).json()["data"]
        assert counts["all"] == 2
        assert counts["coming-soon"] == 1


class TestDiscounts:

    def discount_json(self, book_id, **overrides):
        values = {
            "book_id": book_id,
            "percentage": "20",
            "start_date": (NOW - timedelta(days=1)).isoformat(),
            "end_date": (NOW + timedelta(days=5)).isoformat(),
            "is_on_sale": True,
        }
        values.update(overrides)
        return values

    async def test_discount_flow(self, client, admin_headers):
        book = await post_book(client, admin_headers)

        response = await client.post("/pricing/discounts/", json=self.discount_json(book["id"]), headers=admin_headers)
        assert response.status_code == 201
        discount = response.json()["data"]
        assert discount["book_title"] == book["title"]

        on_sale = (await client.get(f"/catalog/books/{book['id']}")).json()["data"]
        assert on_sale["on_sale"] is True
        assert Decimal(str(on_sale["discount_price"])) == Decimal("80.00")
        assert "deals" in on_sale["categories"]

        deals = (await client.get("/catalog/categories/deals")).json()["data"]
        assert [b["id"] for b in deals] == [book["id"]]

        conflict = await client.post("/pricing/discounts/", json=self.discount_json(book["id"]), headers=admin_headers)
        assert conflict.status_code == 409

        active = (await client.get("/pricing/discounts/active")).json()["data"]
        assert [d["id"] for d in active] == [discount["id"]]

        response = await client.delete(f"/pricing/discounts/{discount['id']}", headers=admin_headers)
        assert response.status_code == 200

        cleared = (await client.get(f"/catalog/books/{book['id']}")).json()["data"]
        assert cleared["on_sale"] is False
        assert cleared["discount_price"] is None

    async def test_discount_for_missing_book_is_404(self, client, admin_headers):
        response = await client.post("/pricing/discounts/", json=self.discount_json(31337), headers=admin_headers)
        assert response.status_code == 404

    async def test_inverted_period_is_400(self, client, admin_headers):
        book = await post_book(client, admin_headers)
        payload = self.discount_json(book["id"], end_date=(NOW - timedelta(days=3)).isoformat())
        response = await client.post("/pricing/discounts/", json=payload, headers=admin_headers)
        assert response.status_code == 400

    async def test_reconcile_requires_admin(self, client, admin_headers):
        assert (await client.post("/pricing/discounts/reconcile")).status_code == 401

        response = await client.post("/pricing/discounts/reconcile", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["books_cleared"] == 0


class TestAnnouncementsAndActivity:

    async def test_announcement_lifecycle(self, client, admin_headers):
        payload = {
            "title": "Author signing",
            "content": "Saturday at noon.",
            "start_date": (NOW - timedelta(hours=1)).isoformat(),
            "end_date": (NOW + timedelta(days=2)).isoformat(),
            "category": "event",
        }
        response = await client.post("/announcements/", json=payload, headers=admin_headers)
        assert response.status_code == 201
        created = response.json()["data"]

        active = (await client.get("/announcements/active")).json()["data"]
        assert [a["id"] for a in active] == [created["id"]]

        response = await client.patch(f"/announcements/{created['id']}/toggle-active", headers=admin_headers)
        assert response.json()["data"]["is_active"] is False
        assert (await client.get("/announcements/active")).status_code == 404

        assert (await client.get("/announcements/categories")).json()["data"] == ["event"]

    async def test_activity_trail_is_admin_only(self, client, admin_headers):
        await post_book(client, admin_headers, title="Audited")

        customer = {"Authorization": f"Bearer {admin_token(role='customer')}"}
        assert (await client.get("/activity/", headers=customer)).status_code == 403

        response = await client.get("/activity/", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["data"][0]["username"] == "catalog-admin"
        assert "Audited" in body["data"][0]["message"]
