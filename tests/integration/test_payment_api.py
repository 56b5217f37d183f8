"""Integration tests for payment API endpoints"""

import uuid
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY


def pay(client: TestClient, bank_id: str = "akbank", amount: str = "1000.00", reference: str = "ORDER_001"):
    return client.post(
        "/api/payment/pay",
        json={"bankId": bank_id, "totalAmount": amount, "orderReference": reference},
    )


def test_health_endpoints(client: TestClient):
    assert client.get("/health/live").json()["status"] == "ok"
    assert client.get("/health/ready").status_code == 200


def test_metrics_endpoint(client: TestClient):
    pay(client)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "payment_transaction_operations_total" in response.text


def test_pay_endpoint(client: TestClient):
    response = pay(client)

    assert response.status_code == 200
    data = response.json()
    assert data["bankId"] == "akbank"
    assert Decimal(str(data["totalAmount"])) == Decimal("1000.00")
    assert Decimal(str(data["netAmount"])) == Decimal("1000.00")
    assert data["status"] == "Success"
    assert data["orderReference"] == "ORDER_001"
    assert uuid.UUID(data["id"])
    assert "X-Request-ID" in response.headers


def test_pay_returns_display_local_time(client: TestClient, clock):
    """Stored in UTC, rendered in Europe/Istanbul (UTC+3)"""
    data = pay(client).json()

    rendered = datetime.fromisoformat(data["transactionDate"])
    assert rendered.utcoffset() == timedelta(hours=3)
    assert rendered == clock.now


@pytest.mark.parametrize(
    "body",
    [
        {"bankId": "", "totalAmount": "10", "orderReference": "ORDER_001"},
        {"bankId": "akbank", "totalAmount": "0", "orderReference": "ORDER_001"},
        {"bankId": "akbank", "totalAmount": "-5", "orderReference": "ORDER_001"},
        {"bankId": "akbank", "totalAmount": "10.005", "orderReference": "ORDER_001"},
        {"bankId": "akbank", "totalAmount": "10", "orderReference": "   "},
        {"bankId": "a" * 51, "totalAmount": "10", "orderReference": "ORDER_001"},
        {"bankId": "akbank", "orderReference": "ORDER_001"},
    ],
)
def test_pay_validation_errors(client: TestClient, body):
    response = client.post("/api/payment/pay", json=body)

    assert response.status_code == 400
    assert response.json()["errors"]


def test_pay_unknown_bank(client: TestClient):
    response = pay(client, bank_id="isbank")

    assert response.status_code == 400
    assert "Invalid Bank Id" in response.json()["detail"]


def test_pay_cancel_search_scenario(client: TestClient):
    """pay -> same-day cancel -> search by bank shows Sale and Cancel"""
    transaction_id = pay(client).json()["id"]

    cancel_response = client.post(f"/api/payment/cancel/{transaction_id}")
    assert cancel_response.status_code == 200
    assert Decimal(str(cancel_response.json()["netAmount"])) == Decimal("0")

    search_response = client.get("/api/payment/search", params={"bankId": "akbank"})
    assert search_response.status_code == 200
    rows = search_response.json()
    assert len(rows) == 1
    assert rows[0]["transactionId"] == transaction_id
    assert sorted(d["transactionType"] for d in rows[0]["details"]) == ["Cancel", "Sale"]
    assert all(Decimal(str(d["amount"])) == Decimal("1000.00") for d in rows[0]["details"])


def test_second_cancel_rejected(client: TestClient):
    transaction_id = pay(client).json()["id"]
    assert client.post(f"/api/payment/cancel/{transaction_id}").status_code == 200

    response = client.post(f"/api/payment/cancel/{transaction_id}")

    assert response.status_code == 400
    assert response.json()["detail"] == "Transaction has already been cancelled or refunded"


def test_cancel_next_day_rejected(client: TestClient, clock):
    transaction_id = pay(client).json()["id"]
    clock.advance(timedelta(days=1))

    response = client.post(f"/api/payment/cancel/{transaction_id}")

    assert response.status_code == 400
    assert response.json()["detail"] == "Cancel operation is only allowed on the same day"


def test_refund_waiting_period(client: TestClient, clock):
    """Refund after 12 hours is rejected, after 48 hours it succeeds"""
    transaction_id = pay(client, bank_id="Garanti").json()["id"]

    clock.advance(timedelta(hours=12))
    early = client.post(f"/api/payment/refund/{transaction_id}")
    assert early.status_code == 400
    assert early.json()["detail"] == "Refund operation is allowed only after one day"

    clock.advance(timedelta(hours=36))
    late = client.post(f"/api/payment/refund/{transaction_id}")
    assert late.status_code == 200
    assert late.json()["bankId"] == "garanti"
    assert Decimal(str(late.json()["netAmount"])) == Decimal("0")


def test_cancel_unknown_transaction(client: TestClient):
    response = client.post(f"/api/payment/cancel/{uuid.uuid4()}")
    assert response.status_code == 404


def test_refund_nil_transaction_id(client: TestClient):
    response = client.post(f"/api/payment/refund/{uuid.UUID(int=0)}")
    assert response.status_code == 400


def test_cancel_malformed_transaction_id(client: TestClient):
    response = client.post("/api/payment/cancel/not-a-uuid")
    assert response.status_code == 400


def test_search_without_filters(client: TestClient):
    pay(client, bank_id="akbank", reference="ORDER_001")
    pay(client, bank_id="yapikredi", reference="ORDER_002")

    rows = client.get("/api/payment/search").json()

    assert {row["orderReference"] for row in rows} == {"ORDER_001", "ORDER_002"}
    assert all(len(row["details"]) == 1 for row in rows)


def test_search_no_match(client: TestClient):
    pay(client)

    response = client.get("/api/payment/search", params={"orderReference": "ORDER_404"})

    assert response.status_code == 200
    assert response.json() == []


def test_search_date_filters(client: TestClient, clock):
    pay(client, reference="ORDER_001")  # 2024-03-10
    clock.advance(timedelta(days=3))
    pay(client, reference="ORDER_002")  # 2024-03-13

    rows = client.get("/api/payment/search", params={"startDate": "2024-03-11", "endDate": "2024-03-14"}).json()

    assert [row["orderReference"] for row in rows] == ["ORDER_002"]


def test_search_invalid_date_range(client: TestClient):
    response = client.get("/api/payment/search", params={"startDate": "2024-03-14", "endDate": "2024-03-11"})

    assert response.status_code == 400
    assert response.json()["errors"]


def test_search_invalid_status(client: TestClient):
    response = client.get("/api/payment/search", params={"status": "Pending"})
    assert response.status_code == 400


def test_search_by_bank_with_pay_spelling(client: TestClient):
    """Pay stores the canonical id; search accepts the caller's spelling"""
    transaction_id = pay(client, bank_id="AKBANK").json()["id"]

    for spelling in ("AKBANK", " Akbank ", "akbank"):
        rows = client.get("/api/payment/search", params={"bankId": spelling}).json()
        assert [row["transactionId"] for row in rows] == [transaction_id]


def test_amount_matches_between_pay_and_search(client: TestClient):
    paid = pay(client, amount="10.50").json()

    rows = client.get("/api/payment/search").json()

    assert Decimal(str(paid["totalAmount"])) == Decimal(str(rows[0]["totalAmount"])) == Decimal("10.50")


def operation_count(operation: str, bank_id: str, outcome: str) -> float:
    labels = {"operation": operation, "bank_id": bank_id, "outcome": outcome}
    return REGISTRY.get_sample_value("payment_transaction_operations_total", labels) or 0.0


def rule_rejection_count(operation: str) -> float:
    return REGISTRY.get_sample_value("payment_business_rule_rejections_total", {"operation": operation}) or 0.0


def test_pay_metrics_use_canonical_bank_label(client: TestClient):
    before = operation_count("pay", "akbank", "success")

    pay(client, bank_id=" AKBANK ")

    assert operation_count("pay", "akbank", "success") == before + 1
    assert operation_count("pay", " AKBANK ", "success") == 0.0


def test_unknown_bank_is_not_a_rule_rejection(client: TestClient):
    invalid_before = operation_count("pay", "unknown", "invalid_bank")
    rejections_before = rule_rejection_count("pay")

    pay(client, bank_id="isbank")

    assert operation_count("pay", "unknown", "invalid_bank") == invalid_before + 1
    assert operation_count("pay", "isbank", "invalid_bank") == 0.0
    assert rule_rejection_count("pay") == rejections_before


def test_reversal_rejection_labelled_with_bank(client: TestClient):
    transaction_id = pay(client, bank_id="Garanti").json()["id"]
    client.post(f"/api/payment/cancel/{transaction_id}")
    rejected_before = operation_count("cancel", "garanti", "rejected")
    rejections_before = rule_rejection_count("cancel")

    client.post(f"/api/payment/cancel/{transaction_id}")

    assert operation_count("cancel", "garanti", "rejected") == rejected_before + 1
    assert rule_rejection_count("cancel") == rejections_before + 1
