from __future__ import annotations

import pytest

PROXY = "/api/proxy"


def _assert_cors(resp):
    assert resp["Access-Control-Allow-Origin"] == "*"
    assert resp["Access-Control-Allow-Credentials"] == "true"
    assert resp["Access-Control-Allow-Methods"] == "GET,OPTIONS,PATCH,DELETE,POST,PUT"
    assert "X-Api-Version" in resp["Access-Control-Allow-Headers"]


def test_relays_provider_json_and_injects_key(client, fake_panel):
    resp = client.post(PROXY, {"action": "balance"}, format="json")

    assert resp.status_code == 200
    assert resp.json() == {"balance": "12.5000", "currency": "USD"}
    assert fake_panel.calls[-1] == {"key": "test-panel-key", "action": "balance"}
    _assert_cors(resp)


def test_params_are_forwarded_verbatim(client, fake_panel):
    fake_panel.on("add", {"order": 99})

    resp = client.post(PROXY, {"action": "add", "service": 1, "link": "https://t.co/x", "quantity": 200},
                       format="json")

    assert resp.json() == {"order": 99}
    assert fake_panel.raw_forms[-1] == [
        ("key", "test-panel-key"),
        ("action", "add"),
        ("service", "1"),
        ("link", "https://t.co/x"),
        ("quantity", "200"),
    ]


def test_missing_action_is_forwarded_as_empty(client, fake_panel):
    resp = client.post(PROXY, {}, format="json")

    assert resp.status_code == 200
    assert resp.json() == {"error": "Incorrect request"}
    assert fake_panel.calls[-1]["action"] == ""


def test_upstream_error_payload_is_relayed_with_200(client, fake_panel):
    fake_panel.on("status", {"error": "Incorrect order ID"})

    resp = client.post(PROXY, {"action": "status", "order": "1"}, format="json")

    assert resp.status_code == 200
    assert resp.json() == {"error": "Incorrect order ID"}


def test_non_json_upstream_is_a_500_without_the_raw_text(client, fake_panel):
    fake_panel.on("balance", text="<html>maintenance</html>")

    resp = client.post(PROXY, {"action": "balance"}, format="json")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Invalid response from provider API"}
    assert b"maintenance" not in resp.content
    _assert_cors(resp)


def test_unreachable_upstream_is_a_generic_500(client, fake_panel):
    fake_panel.fail("balance")

    resp = client.post(PROXY, {"action": "balance"}, format="json")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}


@pytest.mark.parametrize("method", ["get", "put", "patch", "delete"])
def test_other_methods_are_rejected(client, fake_panel, method):
    resp = getattr(client, method)(PROXY)

    assert resp.status_code == 405
    assert resp.json() == {"error": "Method not allowed"}
    assert fake_panel.calls == []
    _assert_cors(resp)


def test_options_is_an_empty_200(client, fake_panel):
    resp = client.options(PROXY)

    assert resp.status_code == 200
    assert resp.content == b""
    _assert_cors(resp)


def test_body_must_be_a_json_object(client, fake_panel):
    resp = client.post(PROXY, [1, 2, 3], format="json")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be a JSON object"}

    resp = client.post(PROXY, data="{not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Request body must be a JSON object"}
    assert fake_panel.calls == []
