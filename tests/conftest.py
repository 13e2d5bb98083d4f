from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from django.core.cache import cache
from rest_framework.test import APIClient

import users.bridge as bridge_mod
from services import panel
from users.backend import BackendClient

SERVICES: List[Dict[str, Any]] = [
    {
        "service": 1, "name": "Facebook Page Likes", "type": "Default", "category": "Facebook Likes",
        "rate": "0.50", "min": "100", "max": "10000", "refill": True, "cancel": False,
    },
    {
        "service": 2, "name": "Facebook Post Likes", "type": "Default", "category": "Facebook Likes",
        "rate": "0.10", "min": "50", "max": "5000", "refill": False, "cancel": True,
    },
    {
        "service": 3, "name": "TikTok Views", "type": "Package", "category": "TikTok Views",
        "rate": "0.02", "min": "500", "max": "1000000", "refill": False, "cancel": False,
    },
]


class FakeResponse:
    def __init__(self, body: Any = None, status_code: int = 200, text: Optional[str] = None):
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        return json.loads(self.text)


# ---------------------------------------------------------------------------
# Provider panel
# ---------------------------------------------------------------------------
class FakePanel:
    """Answers by `action`; every form it receives is kept in `calls`."""

    def __init__(self):
        self.calls: List[Dict[str, str]] = []
        self.raw_forms: List[List] = []
        self.handlers: Dict[str, Any] = {}

    def on(self, action: str, body: Any = None, *, text: Optional[str] = None, status_code: int = 200):
        self.handlers[action] = FakeResponse(body, status_code=status_code, text=text)

    def on_call(self, action: str, fn: Callable[[Dict[str, str]], FakeResponse]):
        self.handlers[action] = fn

    def fail(self, action: str):
        def boom(form):
            raise requests.exceptions.ConnectionError("connection refused")
        self.handlers[action] = boom

    def post(self, url, data=None, headers=None, timeout=None):
        self.raw_forms.append(list(data or []))
        form = dict(data or [])
        self.calls.append(form)
        handler = self.handlers.get(form.get("action"))
        if handler is None:
            return FakeResponse({"error": "Incorrect request"})
        if callable(handler):
            return handler(form)
        return handler

    def actions(self) -> List[str]:
        return [c.get("action") for c in self.calls]


@pytest.fixture
def fake_panel(monkeypatch):
    fp = FakePanel()
    fp.on("services", SERVICES)
    fp.on("balance", {"balance": "12.5000", "currency": "USD"})
    monkeypatch.setattr(panel.Session, "post", fp.post)
    return fp


# ---------------------------------------------------------------------------
# Auth / profile backend
# ---------------------------------------------------------------------------
class FakeBackend:
    """In-memory GoTrue + PostgREST `profiles`, enough for the bridge."""

    def __init__(self):
        self.users: Dict[str, Dict[str, str]] = {}
        self.profiles: List[Dict[str, Any]] = []
        self.refresh_tokens: Dict[str, str] = {}
        self.requests: List[tuple] = []
        self.down = False
        self.profiles_down = False
        self._seq = 0

    def _session_body(self, user: Dict[str, str]) -> Dict[str, Any]:
        self._seq += 1
        refresh = f"refresh-{self._seq}"
        self.refresh_tokens[refresh] = user["id"]
        return {
            "access_token": f"access-{self._seq}",
            "refresh_token": refresh,
            "user": {"id": user["id"], "email": user.get("email", "")},
        }

    def _new_user(self, email: str = "", password: str = "") -> Dict[str, str]:
        user = {"id": f"uid-{len(self.users) + 1}", "email": email, "password": password}
        self.users[user["id"]] = user
        return user

    def _by_email(self, email: str) -> Optional[Dict[str, str]]:
        return next((u for u in self.users.values() if u["email"] == email), None)

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = url.split("://", 1)[-1].split("/", 1)[-1]
        path = "/" + path
        params = params or {}
        self.requests.append((method, path, json, dict(params)))
        if self.down:
            raise requests.exceptions.ConnectionError("backend offline")

        if path == "/auth/v1/signup":
            email = (json or {}).get("email", "")
            if email and self._by_email(email):
                return FakeResponse({"msg": "User already registered"}, status_code=422)
            return FakeResponse(self._session_body(self._new_user(email, (json or {}).get("password", ""))))

        if path == "/auth/v1/token":
            if params.get("grant_type") == "password":
                user = self._by_email(json["email"])
                if user is None or user["password"] != json["password"]:
                    return FakeResponse({"error_description": "Invalid login credentials"}, status_code=400)
                return FakeResponse(self._session_body(user))
            uid = self.refresh_tokens.pop(json.get("refresh_token"), None)
            if uid is None:
                return FakeResponse({"error_description": "Invalid Refresh Token"}, status_code=400)
            return FakeResponse(self._session_body(self.users[uid]))

        if path == "/auth/v1/logout":
            return FakeResponse(None, status_code=204)

        if path == "/rest/v1/profiles":
            if self.profiles_down:
                raise requests.exceptions.ConnectionError("profiles offline")
            if method == "POST":
                self.profiles.append(dict(json))
                return FakeResponse([dict(json)], status_code=201)
            wanted = params.get("id", "")
            rows = self.profiles
            if wanted.startswith("eq."):
                rows = [p for p in rows if p["id"] == wanted[3:]]
            return FakeResponse(rows)

        return FakeResponse({"msg": "not found"}, status_code=404)


@pytest.fixture
def fake_backend(monkeypatch):
    fb = FakeBackend()

    def client_factory():
        return BackendClient("https://backend.test", "anon-key", session=fb)

    monkeypatch.setattr(bridge_mod, "BackendClient", client_factory)
    return fb


# ---------------------------------------------------------------------------
# Settings / client
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def storefront_settings(settings):
    settings.PANEL_API_URL = "https://panel.test/api/v2"
    settings.PANEL_API_KEY = "test-panel-key"
    settings.USD_TO_BDT = "120"
    settings.CATALOGUE_RATE_SURCHARGE = "0"
    settings.ORDER_FLAT_FEE = "0"
    settings.FUNDS_MINIMUM = "20"
    settings.FUNDS_SURCHARGE = "7"
    settings.FUNDS_PROCESSING_DELAY = 0
    settings.SUPABASE_URL = "https://backend.test"
    settings.SUPABASE_ANON_KEY = "anon-key"
    settings.AUTH_ANONYMOUS_MODE = "stored"
    settings.CATALOGUE_CACHE_TIMEOUT = 300
    cache.clear()
    return settings


@pytest.fixture
def client():
    return APIClient()
