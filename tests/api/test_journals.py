"""
Tests for the journal entry API endpoints.
"""

import pytest

from general_ledger.models.enums import AccountType


@pytest.fixture
def accounts(make_account):
    cash = make_account("1001", "Cash", AccountType.ASSET)
    sales = make_account("4000", "Sales Revenue", AccountType.REVENUE)
    return cash, sales


def _entry(cash, sales, amount="100.00", reference="SALE-1", entry_date="2024-01-01"):
    return {
        "date": entry_date,
        "reference": reference,
        "description": "Cash sale",
        "items": [
            {"account_id": cash.id, "debit": amount, "credit": "0"},
            {"account_id": sales.id, "debit": "0", "credit": amount},
        ],
    }


def test_post_balanced_entry_returns_201(client, accounts):
    response = client.post("/accounting/journals", json=_entry(*accounts))

    assert response.status_code == 201
    data = response.json()
    assert data["reference"] == "SALE-1"
    assert data["status"] == "posted"
    assert [i["account_code"] for i in data["items"]] == ["1001", "4000"]
    assert data["total_debit"] == data["total_credit"] == "100.00"


def test_post_unbalanced_entry_returns_422(client, accounts):
    cash, sales = accounts
    body = _entry(cash, sales)
    body["items"][1]["credit"] = "90.00"

    response = client.post("/accounting/journals", json=body)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "UNBALANCED_ENTRY"
    assert client.get("/accounting/journals").json()["pagination"]["total_items"] == 0


def test_post_unknown_account_returns_422(client, accounts):
    cash, sales = accounts
    body = _entry(cash, sales)
    body["items"][1]["account_id"] = 999

    response = client.post("/accounting/journals", json=body)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "INVALID_ACCOUNT"


def test_post_without_items_returns_422(client, accounts):
    body = _entry(*accounts)
    body["items"] = []

    response = client.post("/accounting/journals", json=body)

    assert response.status_code == 422


def test_negative_amount_returns_422(client, accounts):
    body = _entry(*accounts)
    body["items"][0]["debit"] = "-100.00"

    response = client.post("/accounting/journals", json=body)

    assert response.status_code == 422


def test_get_missing_entry_returns_404(client):
    response = client.get("/accounting/journals/999")
    assert response.status_code == 404


def test_replace_entry(client, accounts):
    created = client.post("/accounting/journals", json=_entry(*accounts)).json()

    response = client.put(
        f"/accounting/journals/{created['id']}",
        json=_entry(*accounts, amount="250.00", reference="SALE-1-FIXED"),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["reference"] == "SALE-1-FIXED"
    assert len(data["items"]) == 2
    assert data["total_debit"] == "250.00"


def test_list_newest_first(client, accounts):
    client.post("/accounting/journals", json=_entry(*accounts, reference="A", entry_date="2024-01-01"))
    client.post("/accounting/journals", json=_entry(*accounts, reference="B", entry_date="2024-03-01"))
    client.post("/accounting/journals", json=_entry(*accounts, reference="C", entry_date="2024-02-01"))

    response = client.get("/accounting/journals")

    assert [e["reference"] for e in response.json()["data"]] == ["B", "C", "A"]


def test_delete_entry(client, accounts):
    created = client.post("/accounting/journals", json=_entry(*accounts)).json()

    response = client.delete(f"/accounting/journals/{created['id']}")

    assert response.status_code == 200
    assert client.get(f"/accounting/journals/{created['id']}").status_code == 404


def test_requested_status_ignored(client, accounts):
    body = _entry(*accounts)
    body["status"] = "draft"

    response = client.post("/accounting/journals", json=body)

    assert response.status_code == 201
    assert response.json()["status"] == "posted"
