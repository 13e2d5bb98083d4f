# users/backend.py
"""
Client for the hosted auth + profile backend (GoTrue auth, PostgREST tables).

Only the calls the storefront needs: sign-up / sign-in / refresh / sign-out /
current user, and select-by-id / insert / select-all on `profiles`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from django.conf import settings

from core.logging import make_provider_logger

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
PROFILE_COLUMNS = ("id", "user_id", "full_name", "email", "balance")


class BackendError(Exception):
    def __init__(self, message: str, status_code: int = 0, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class BackendSession:
    access_token: str
    refresh_token: str
    user_id: str
    email: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "user_id": self.user_id,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["BackendSession"]:
        if not data or not data.get("access_token") or not data.get("user_id"):
            return None
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            user_id=data["user_id"],
            email=data.get("email") or "",
        )


def _session_from_body(body: Dict[str, Any]) -> Optional[BackendSession]:
    token = body.get("access_token")
    user = body.get("user") or {}
    if not token or not user.get("id"):
        return None
    return BackendSession(
        access_token=token,
        refresh_token=body.get("refresh_token") or "",
        user_id=str(user["id"]),
        email=user.get("email") or "",
    )


def _error_text(body: Any, default: str) -> str:
    if isinstance(body, dict):
        for k in ("error_description", "msg", "message", "error"):
            if body.get(k):
                return str(body[k])
    return default


class BackendClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[Tuple[float, float]] = None,
        log_fn: Optional[Callable[[Dict], None]] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.SUPABASE_ANON_KEY
        self.http = session or requests.Session()
        self.timeout = timeout or (
            float(getattr(settings, "BACKEND_TIMEOUT_CONNECT", 5)),
            float(getattr(settings, "BACKEND_TIMEOUT_READ", 15)),
        )
        self.log_fn = log_fn or make_provider_logger("backend")

    # ----------------------------- transport ------------------------------ #

    def _headers(self, access_token: Optional[str] = None, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        h = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if extra:
            h.update(extra)
        return h

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        if not self.base_url:
            raise BackendError("Auth backend is not configured")

        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(access_token, headers),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.log_fn({"endpoint": path, "status_code": 0, "request": json or params or {}, "response": {"error": str(e)}})
            raise BackendError(f"Auth backend unreachable: {e}") from e

        try:
            body = resp.json() if resp.content else None
        except ValueError:
            body = {"raw": resp.text[:200]}

        self.log_fn({
            "endpoint": path,
            "status_code": resp.status_code,
            "request": json or params or {},
            "response": body if isinstance(body, dict) else {"rows": len(body) if isinstance(body, list) else 0},
        })

        if resp.status_code >= 400:
            raise BackendError(_error_text(body, f"Auth backend error ({resp.status_code})"), resp.status_code, body)
        return body

    def _session_call(self, path: str, payload: Dict[str, Any], params: Optional[Dict[str, str]] = None) -> BackendSession:
        body = self._request("POST", path, json=payload, params=params) or {}
        session = _session_from_body(body)
        if session is None:
            # e.g. sign-up that still needs email confirmation
            raise BackendError(_error_text(body, "No session returned by auth backend"), 0, body)
        return session

    # -------------------------------- auth -------------------------------- #

    def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> BackendSession:
        payload: Dict[str, Any] = {"email": email, "password": password}
        if metadata:
            payload["data"] = metadata
        return self._session_call("/auth/v1/signup", payload)

    def sign_in_with_password(self, email: str, password: str) -> BackendSession:
        return self._session_call("/auth/v1/token", {"email": email, "password": password}, {"grant_type": "password"})

    def sign_in_anonymously(self) -> BackendSession:
        return self._session_call("/auth/v1/signup", {"data": {}})

    def refresh_session(self, refresh_token: str) -> BackendSession:
        return self._session_call("/auth/v1/token", {"refresh_token": refresh_token}, {"grant_type": "refresh_token"})

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/auth/v1/logout", access_token=access_token)

    def get_user(self, access_token: str) -> Dict[str, Any]:
        return self._request("GET", "/auth/v1/user", access_token=access_token) or {}

    # ------------------------------ profiles ------------------------------ #

    def select_profile(self, profile_id: str, access_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
        rows = self._request(
            "GET",
            f"/rest/v1/{PROFILES_TABLE}",
            params={"id": f"eq.{profile_id}", "select": ",".join(PROFILE_COLUMNS)},
            access_token=access_token,
        )
        return rows[0] if isinstance(rows, list) and rows else None

    def insert_profile(self, row: Dict[str, Any], access_token: Optional[str] = None) -> Dict[str, Any]:
        rows = self._request(
            "POST",
            f"/rest/v1/{PROFILES_TABLE}",
            json=row,
            access_token=access_token,
            headers={"Prefer": "return=representation"},
        )
        if isinstance(rows, list) and rows:
            return rows[0]
        return dict(row)

    def select_profiles(self, access_token: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = self._request(
            "GET",
            f"/rest/v1/{PROFILES_TABLE}",
            params={"select": ",".join(PROFILE_COLUMNS)},
            access_token=access_token,
        )
        return rows if isinstance(rows, list) else []
