# services/panel.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from django.conf import settings

from core.logging import make_provider_logger
from core.money import to_decimal
from core.results import Err, Ok, Result

logger = logging.getLogger(__name__)

# ============================================================================
# Errors
# ============================================================================


class ProviderError(Exception):
    """Transport-level failure talking to the panel (never a business error)."""


class ProviderUnavailable(ProviderError):
    pass


class InvalidProviderResponse(ProviderError):
    def __init__(self, raw: str, status_code: int):
        super().__init__("Invalid response from provider API")
        self.raw = raw
        self.status_code = status_code


GENERIC_FAILURE = "Failed to reach the provider. Please try again."

Session = requests.Session()


# ============================================================================
# Helpers
# ============================================================================

def _timeout() -> Tuple[float, float]:
    return (
        float(getattr(settings, "PANEL_TIMEOUT_CONNECT", 5)),
        float(getattr(settings, "PANEL_TIMEOUT_READ", 25)),
    )


def stringify(value: Any) -> str:
    """
    Form values are sent the way the browser client sent them:
    true/false/null in lowercase, containers as compact JSON.
    """
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_form(action: str, params: Optional[Dict[str, Any]] = None) -> List[Tuple[str, str]]:
    """
    key + action first, then every param verbatim. A list of pairs keeps the
    wire order stable and lets a caller-supplied `key` through untouched.
    """
    form = [("key", settings.PANEL_API_KEY), ("action", stringify(action) if action is not None else "")]
    for k, v in (params or {}).items():
        form.append((str(k), stringify(v)))
    return form


def _summarize(body: Any) -> Any:
    # service lists run into the thousands; log the size only
    if isinstance(body, list):
        return {"items": len(body)}
    return body


def post_action(
    action: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    log_fn: Optional[Callable[[Dict], None]] = None,
) -> Any:
    """
    Single POST to the panel. Returns the decoded JSON body (dict or list).
    No retries: an `add` that timed out may still have been placed upstream.
    """
    log_fn = log_fn or make_provider_logger("panel")
    url = settings.PANEL_API_URL
    form = build_form(action, params)

    try:
        resp = Session.post(
            url,
            data=form,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=_timeout(),
        )
    except requests.exceptions.RequestException as e:
        log_fn({
            "endpoint": action,
            "status_code": 0,
            "request": dict(form),
            "response": {"error": str(e)},
        })
        raise ProviderUnavailable(str(e)) from e

    text = resp.text
    try:
        body = json.loads(text)
    except ValueError:
        logger.error("Failed to parse panel response for %r: %s", action, text)
        raise InvalidProviderResponse(text, resp.status_code)

    log_fn({
        "endpoint": action,
        "status_code": resp.status_code,
        "request": dict(form),
        "response": _summarize(body),
    })
    return body


def _error_message(body: Any, default: str = "Unknown error") -> str:
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default


# ============================================================================
# Wire types
# ============================================================================

@dataclass(frozen=True)
class ApiService:
    service: int
    name: str
    type: str
    category: str
    rate: str
    min: int
    max: int
    refill: bool
    cancel: bool

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "ApiService":
        """Raises ValueError/KeyError/TypeError on a malformed entry."""
        rate = str(item["rate"]).strip()
        to_decimal(rate)
        return cls(
            service=int(item["service"]),
            name=str(item["name"]),
            type=str(item.get("type") or ""),
            category=str(item["category"]),
            rate=rate,
            min=int(str(item["min"]).strip()),
            max=int(str(item["max"]).strip()),
            refill=bool(item.get("refill")),
            cancel=bool(item.get("cancel")),
        )


# ============================================================================
# Typed actions
# ============================================================================

def _call(action: str, params: Optional[Dict[str, Any]] = None) -> Tuple[bool, Any]:
    try:
        return True, post_action(action, params)
    except ProviderError:
        logger.exception("Panel action %r failed", action)
        return False, None


def get_balance() -> Result:
    ok, body = _call("balance")
    if not ok:
        return Err(GENERIC_FAILURE)
    if isinstance(body, dict) and body.get("balance") not in (None, ""):
        try:
            return Ok(to_decimal(body["balance"]))
        except ValueError:
            logger.warning("Panel returned a non-numeric balance: %r", body.get("balance"))
            return Err("Provider returned an invalid balance")
    return Err(_error_message(body))


def get_services() -> Result:
    """Ok(list of raw service dicts) or Err. Entry validation is the catalogue's job."""
    ok, body = _call("services")
    if not ok:
        return Err(GENERIC_FAILURE)
    if isinstance(body, list):
        return Ok(body)
    return Err(_error_message(body, "Unexpected services payload from provider"))


def add_order(service: str, link: str, quantity: int) -> Result:
    ok, body = _call("add", {"service": service, "link": link, "quantity": quantity})
    if not ok:
        return Err(GENERIC_FAILURE)
    if isinstance(body, dict) and body.get("order"):
        return Ok(str(body["order"]))
    return Err(_error_message(body))


def order_status(order_id: str) -> Result:
    ok, body = _call("status", {"order": order_id})
    if not ok:
        return Err(GENERIC_FAILURE)
    if isinstance(body, dict) and body.get("status"):
        return Ok(str(body["status"]).lower())
    return Err(_error_message(body))
