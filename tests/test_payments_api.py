from __future__ import annotations


def test_funds_page_shows_numbers_surcharge_and_minimum(client):
    resp = client.get("/api/payments/")

    assert resp.status_code == 200
    data = resp.json()
    assert data["form"] == {"step": "amount-entry", "method": "nagad", "amount": "", "transaction_id": ""}
    assert data["payment_number"] == data["payment_numbers"]["nagad"]
    assert set(data["payment_numbers"]) == {"nagad", "bkash"}
    assert (data["surcharge"], data["minimum"]) == ("7.00", "20.00")
    assert data["total_payable"] is None
    assert data["history"] == []


def test_amount_below_minimum_is_a_400(client):
    resp = client.post("/api/payments/amount/", {"amount": "10"}, format="json")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Minimum amount is 20 BDT"
    assert resp.json()["form"]["step"] == "amount-entry"


def test_unknown_method_is_a_400(client):
    resp = client.post("/api/payments/method/", {"method": "paypal"}, format="json")

    assert resp.status_code == 400
    assert "Unsupported payment method" in resp.json()["error"]


def test_full_top_up_request(client):
    client.post("/api/payments/method/", {"method": "bkash"}, format="json")
    resp = client.post("/api/payments/amount/", {"amount": "500"}, format="json")

    assert resp.status_code == 200
    assert resp.json()["form"]["step"] == "verify-entry"
    assert resp.json()["total_payable"] == "507.00"
    assert resp.json()["payment_number"] == resp.json()["payment_numbers"]["bkash"]

    resp = client.post("/api/payments/submit/", {"transaction_id": "9a8b7c"}, format="json")

    assert resp.status_code == 201
    data = resp.json()
    assert data["record"]["status"] == "pending"
    assert data["record"]["transaction_id"] == "9A8B7C"
    assert data["record"]["amount"] == "500.00"
    assert data["record"]["method"] == "bkash"
    assert data["form"]["step"] == "amount-entry"
    assert data["form"]["amount"] == ""
    assert [h["id"] for h in data["history"]] == [data["record"]["id"]]


def test_submit_without_transaction_id_changes_nothing(client):
    client.post("/api/payments/amount/", {"amount": "100"}, format="json")

    resp = client.post("/api/payments/submit/", {"transaction_id": ""}, format="json")

    assert resp.status_code == 200
    assert "record" not in resp.json()
    assert resp.json()["form"]["step"] == "verify-entry"
    assert resp.json()["history"] == []


def test_back_from_verify_entry(client):
    client.post("/api/payments/amount/", {"amount": "100"}, format="json")

    resp = client.post("/api/payments/back/")

    assert resp.json()["form"] == {"step": "amount-entry", "method": "nagad", "amount": "100", "transaction_id": ""}


def test_support_contacts(client):
    resp = client.get("/api/support/")

    assert resp.status_code == 200
    assert resp.json()["telegram"].startswith("https://t.me/")
    assert resp.json()["whatsapp"].startswith("https://wa.me/88")


def test_amount_is_locked_once_it_passed_the_minimum(client):
    client.post("/api/payments/method/", {"method": "nagad"}, format="json")
    client.post("/api/payments/amount/", {"amount": "100"}, format="json")

    resp = client.post("/api/payments/amount/", {"amount": "5"}, format="json")

    assert resp.status_code == 200
    assert resp.json()["form"]["step"] == "verify-entry"
    assert resp.json()["form"]["amount"] == "100"

    resp = client.post("/api/payments/submit/", {"transaction_id": "TX1"}, format="json")

    assert resp.status_code == 201
    assert resp.json()["record"]["amount"] == "100.00"


def test_amount_can_be_changed_after_going_back(client):
    client.post("/api/payments/amount/", {"amount": "100"}, format="json")
    client.post("/api/payments/back/")

    resp = client.post("/api/payments/amount/", {"amount": "5"}, format="json")

    assert resp.status_code == 400
    assert resp.json()["form"] == {"step": "amount-entry", "method": "nagad", "amount": "5", "transaction_id": ""}
