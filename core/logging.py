# core/logging.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

SENSITIVE_KEYS = {
    "key",
    "apikey",
    "api-key",
    "password",
    "access_token",
    "refresh_token",
    "authorization",
    "email",
}


def mask_value(val: Optional[Any]) -> str:
    if val is None or val == "":
        return ""
    s = str(val)
    if "@" in s:
        name, _, domain = s.partition("@")
        return (name[:2] + "***@" + domain) if name else "***@" + domain
    if len(s) > 6:
        return s[:3] + "***" + s[-3:]
    return "***"


def mask_payload(payload: Any) -> Any:
    """Copy of `payload` with credentials and PII masked. Non-dicts pass through."""
    if not isinstance(payload, dict):
        return payload
    masked = {}
    for k, v in payload.items():
        if str(k).lower() in SENSITIVE_KEYS:
            masked[k] = mask_value(v)
        elif isinstance(v, dict):
            masked[k] = mask_payload(v)
        else:
            masked[k] = v
    return masked


def make_provider_logger(provider: str, logger: Optional[logging.Logger] = None) -> Callable[[Dict], None]:
    """
    Build a `log_fn` for the outbound clients. Each call receives one I/O record
    ({endpoint, status_code, request, response}) and writes it masked.
    """
    log = logger or logging.getLogger(f"provider.{provider}")

    def _save(record: Dict) -> None:
        status_code = record.get("status_code")
        level = logging.INFO if status_code and int(status_code) < 400 else logging.WARNING
        log.log(
            level,
            "%s %s -> %s | req=%s res=%s",
            provider,
            record.get("endpoint", "-"),
            status_code,
            mask_payload(record.get("request") or {}),
            mask_payload(record.get("response") or {}),
        )

    return _save
