from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from src.daily_summaries.services import DailySummaryServices


def sale_payload(**overrides):
    payload = {
        "date": "2024-05-01",
        "product": "Consulting",
        "quantity": 1,
        "price": "100.00",
        "total": "100.00",
    }
    payload.update(overrides)
    return payload


class TestCreateSale:

    async def test_returns_201_with_created_row(self, client):
        response = await client.post("/api/sales", json=sale_payload(customer_name="Walk-in"))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"] > 0
        assert body["data"]["date"] == "2024-05-01"
        assert body["data"]["customer_name"] == "Walk-in"
        assert Decimal(body["data"]["total"]) == Decimal("100.00")

    async def test_two_sales_roll_up_into_one_summary(self, client, user, get_summary):
        await client.post("/api/sales", json=sale_payload(total="100.00"))
        await client.post("/api/sales", json=sale_payload(total="50.00", price="50.00"))

        summary = await get_summary(user, "2024-05-01")
        assert summary.total_sales == Decimal("150.00")
        assert summary.total_expenses == Decimal("0.00")
        assert summary.balance == Decimal("150.00")

    async def test_total_is_kept_as_supplied(self, client):
        response = await client.post(
            "/api/sales", json=sale_payload(quantity=2, price="10.00", total="15.00")
        )

        assert Decimal(response.json()["data"]["total"]) == Decimal("15.00")

    async def test_quantity_defaults_to_one(self, client):
        payload = sale_payload()
        del payload["quantity"]

        response = await client.post("/api/sales", json=payload)

        assert response.json()["data"]["quantity"] == 1

    async def test_accepts_numeric_json_amounts(self, client):
        response = await client.post("/api/sales", json=sale_payload(price=19.99, total=39.98, quantity=2))

        assert response.status_code == 201
        assert Decimal(response.json()["data"]["total"]) == Decimal("39.98")

    async def test_missing_product_is_a_400_naming_the_field(self, client, user, get_summary):
        payload = sale_payload()
        del payload["product"]

        response = await client.post("/api/sales", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("product:")
        assert body["errors"][0]["field"] == "product"
        assert await get_summary(user, "2024-05-01") is None

    async def test_non_positive_quantity_is_rejected(self, client):
        response = await client.post("/api/sales", json=sale_payload(quantity=0))

        assert response.status_code == 400
        assert response.json()["message"].startswith("quantity:")

    async def test_more_than_two_decimals_is_rejected(self, client):
        response = await client.post("/api/sales", json=sale_payload(total="10.005"))

        assert response.status_code == 400

    async def test_links_own_customer_and_copies_name(self, client, user, make_customer):
        customer = await make_customer(user, name="Grace")

        response = await client.post("/api/sales", json=sale_payload(customer_id=customer.id))

        assert response.status_code == 201
        assert response.json()["data"]["customer_id"] == customer.id
        assert response.json()["data"]["customer_name"] == "Grace"

    async def test_other_users_customer_is_not_found(self, client, other_user, make_customer):
        customer = await make_customer(other_user, name="Hidden")

        response = await client.post("/api/sales", json=sale_payload(customer_id=customer.id))

        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"


class TestListSales:

    async def test_newest_date_first_then_newest_row(self, client, user, make_sale):
        await make_sale(user, "2024-05-01", "1.00", product="a")
        await make_sale(user, "2024-05-03", "1.00", product="b")
        await make_sale(user, "2024-05-01", "1.00", product="c")

        response = await client.get("/api/sales")

        assert [s["product"] for s in response.json()["data"]] == ["b", "c", "a"]

    async def test_only_lists_own_sales(self, client, user, other_user, make_sale):
        await make_sale(user, "2024-05-01", "1.00", product="mine")
        await make_sale(other_user, "2024-05-01", "1.00", product="theirs")

        response = await client.get("/api/sales")

        assert [s["product"] for s in response.json()["data"]] == ["mine"]

    async def test_search_matches_product(self, client, user, make_sale):
        await make_sale(user, "2024-05-01", "1.00", product="Blue Paint")
        await make_sale(user, "2024-05-01", "1.00", product="Brushes")

        response = await client.get("/api/sales", params={"search": "paint"})

        assert [s["product"] for s in response.json()["data"]] == ["Blue Paint"]


class TestUpdateSale:

    async def test_moving_date_resyncs_both_days(self, client, user, get_summary):
        created = await client.post("/api/sales", json=sale_payload(date="2024-05-01", total="80.00"))
        await client.post("/api/sales", json=sale_payload(date="2024-05-01", total="20.00"))
        sale_id = created.json()["data"]["id"]

        response = await client.put(f"/api/sales/{sale_id}", json={"date": "2024-05-02"})

        assert response.status_code == 200
        assert response.json()["data"]["date"] == "2024-05-02"
        assert (await get_summary(user, "2024-05-01")).total_sales == Decimal("20.00")
        assert (await get_summary(user, "2024-05-02")).total_sales == Decimal("80.00")

    async def test_changing_total_resyncs_the_day(self, client, user, get_summary):
        created = await client.post("/api/sales", json=sale_payload(total="80.00"))
        sale_id = created.json()["data"]["id"]

        await client.put(f"/api/sales/{sale_id}", json={"total": "65.50"})

        assert (await get_summary(user, "2024-05-01")).total_sales == Decimal("65.50")

    async def test_empty_update_is_rejected(self, client):
        created = await client.post("/api/sales", json=sale_payload())
        sale_id = created.json()["data"]["id"]

        response = await client.put(f"/api/sales/{sale_id}", json={})

        assert response.status_code == 400

    async def test_null_for_required_field_is_rejected(self, client):
        created = await client.post("/api/sales", json=sale_payload())
        sale_id = created.json()["data"]["id"]

        response = await client.put(f"/api/sales/{sale_id}", json={"product": None})

        assert response.status_code == 400
        assert response.json()["message"].startswith("product:")

    async def test_missing_sale_is_404(self, client):
        response = await client.put("/api/sales/9999", json={"total": "1.00"})

        assert response.status_code == 404
        assert response.json()["message"] == "Sale not found"


class TestDeleteSale:

    async def test_returns_204_and_keeps_zeroed_summary(self, client, user, get_summary):
        created = await client.post("/api/sales", json=sale_payload(total="100.00"))
        sale_id = created.json()["data"]["id"]

        response = await client.delete(f"/api/sales/{sale_id}")

        assert response.status_code == 204
        assert response.content == b""
        summary = await get_summary(user, "2024-05-01")
        assert summary is not None
        assert summary.total_sales == Decimal("0.00")
        assert summary.balance == Decimal("0.00")

        assert (await client.get(f"/api/sales/{sale_id}")).status_code == 404

    async def test_deleting_twice_is_404(self, client):
        created = await client.post("/api/sales", json=sale_payload())
        sale_id = created.json()["data"]["id"]

        first = await client.delete(f"/api/sales/{sale_id}")
        second = await client.delete(f"/api/sales/{sale_id}")

        assert first.status_code == 204
        assert second.status_code == 404
        assert second.json()["message"] == "Sale not found"


class TestSaleOwnership:

    async def test_other_users_sale_looks_missing(self, client, other_user, make_sale):
        theirs = await make_sale(other_user, "2024-05-01", "10.00")

        missing = await client.get("/api/sales/9999")
        responses = [
            await client.get(f"/api/sales/{theirs.id}"),
            await client.put(f"/api/sales/{theirs.id}", json={"total": "1.00"}),
            await client.delete(f"/api/sales/{theirs.id}"),
        ]

        for response in responses:
            assert response.status_code == missing.status_code == 404
            assert response.json() == missing.json()

    async def test_other_users_sale_is_untouched(self, client, session, other_user, make_sale):
        theirs = await make_sale(other_user, "2024-05-01", "10.00")

        await client.put(f"/api/sales/{theirs.id}", json={"total": "1.00"})
        await client.delete(f"/api/sales/{theirs.id}")

        await session.refresh(theirs)
        assert theirs.total == Decimal("10.00")


class TestSummarySyncFailure:

    @pytest.fixture
    def failing_sync(self, monkeypatch):
        async def sync_daily_summary(self, user_uuid, summary_date, session):
            raise OperationalError("UPDATE daily_summaries", {}, Exception("disk I/O error"))

        monkeypatch.setattr(DailySummaryServices, "sync_daily_summary", sync_daily_summary)

    def assert_generic_500(self, response, message):
        assert response.status_code == 500
        body = response.json()
        assert body == {"success": False, "message": message, "data": None}
        assert "disk I/O" not in response.text
        assert "daily_summaries" not in response.text

    async def test_create_fails(self, client, failing_sync):
        response = await client.post("/api/sales", json=sale_payload())

        self.assert_generic_500(response, "failed to create sale")

    async def test_update_fails(self, client, user, make_sale, failing_sync):
        sale = await make_sale(user, "2024-05-01", "10.00")

        response = await client.put(f"/api/sales/{sale.id}", json={"total": "12.00"})

        self.assert_generic_500(response, "internal server error")

    async def test_delete_fails(self, client, user, make_sale, failing_sync):
        sale = await make_sale(user, "2024-05-01", "10.00")

        response = await client.delete(f"/api/sales/{sale.id}")

        self.assert_generic_500(response, "internal server error")
