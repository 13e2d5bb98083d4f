# users/bridge.py
from __future__ import annotations

import logging
import secrets
import string
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, MutableMapping, Optional

from django.conf import settings

from core.money import q

from .backend import BackendClient, BackendError, BackendSession

logger = logging.getLogger(__name__)

# Fixed keys in the visitor's session
GUEST_EMAIL_KEY = "topupbd_guest_email"
GUEST_PASSWORD_KEY = "topupbd_guest_password"
SESSION_KEY = "topupbd_backend_session"

GUEST_EMAIL_DOMAIN = "guest.topupbd.app"
FALLBACK_USER_ID = "GUEST"

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

_DISPLAY_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_display_id(length: int = 6) -> str:
    return "".join(secrets.choice(_DISPLAY_ID_ALPHABET) for _ in range(length))


@dataclass
class UserData:
    user_id: str
    email: str
    full_name: str
    balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["balance"] = str(self.balance)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["UserData"]:
        if not data:
            return None
        return cls(
            user_id=str(data.get("user_id") or ""),
            email=data.get("email") or "",
            full_name=data.get("full_name") or "",
            balance=q(data.get("balance") or 0),
        )

    @property
    def is_fallback(self) -> bool:
        return self.user_id == FALLBACK_USER_ID

    @classmethod
    def from_profile(cls, row: Dict[str, Any]) -> "UserData":
        return cls(
            user_id=str(row.get("user_id") or ""),
            email=row.get("email") or "",
            full_name=row.get("full_name") or "",
            balance=q(row.get("balance") or 0),
        )


def fallback_user(email: str = "") -> UserData:
    """In-memory identity used when the backend is down; never persisted upstream."""
    return UserData(user_id=FALLBACK_USER_ID, email=email, full_name="Guest", balance=q(0))


# ---------------------------------------------------------------------------
# Anonymous identity
# ---------------------------------------------------------------------------
class AnonymousIdentityProvider(ABC):
    """Gives a visitor without a session some backend identity."""

    @abstractmethod
    def sign_in(self, client: BackendClient, storage: MutableMapping) -> BackendSession:
        ...


class StoredGuestIdentity(AnonymousIdentityProvider):
    """
    Generate a throwaway email/password once, keep it in the visitor's
    storage and reuse it on every later visit.
    """

    def credentials(self, storage: MutableMapping) -> tuple:
        email = storage.get(GUEST_EMAIL_KEY)
        password = storage.get(GUEST_PASSWORD_KEY)
        created = False
        if not email or not password:
            email = f"guest-{secrets.token_hex(6)}@{GUEST_EMAIL_DOMAIN}"
            password = secrets.token_urlsafe(18)
            storage[GUEST_EMAIL_KEY] = email
            storage[GUEST_PASSWORD_KEY] = password
            created = True
        return email, password, created

    def sign_in(self, client: BackendClient, storage: MutableMapping) -> BackendSession:
        email, password, created = self.credentials(storage)
        if created:
            try:
                return client.sign_up(email, password, {"full_name": "Guest"})
            except BackendError:
                # account may exist already (or need confirmation); try a plain sign-in
                logger.info("Guest sign-up did not return a session; falling back to sign-in")
            return client.sign_in_with_password(email, password)
        try:
            return client.sign_in_with_password(email, password)
        except BackendError:
            # stored pair whose sign-up never reached the backend
            logger.info("Stored guest could not sign in; registering it again")
            return client.sign_up(email, password, {"full_name": "Guest"})


class NativeAnonymousIdentity(AnonymousIdentityProvider):
    """Backend-native anonymous sessions; nothing is stored locally."""

    def sign_in(self, client: BackendClient, storage: MutableMapping) -> BackendSession:
        return client.sign_in_anonymously()


def identity_provider_for(mode: str) -> AnonymousIdentityProvider:
    if (mode or "").strip().lower() == "native":
        return NativeAnonymousIdentity()
    return StoredGuestIdentity()


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------
AuthListener = Callable[[str, Optional[BackendSession]], None]


class AuthBridge:
    """
    Keeps `current_user` in step with the backend session stored for a visitor.

    Every session change (sign-in, sign-out, token refresh) is announced to the
    `on_auth_state_change` subscribers; the bridge subscribes its own profile
    resolution, so `current_user` always follows the session.
    """

    def __init__(
        self,
        client: BackendClient,
        storage: MutableMapping,
        identity: Optional[AnonymousIdentityProvider] = None,
    ):
        self.client = client
        self.storage = storage
        self.identity = identity or StoredGuestIdentity()
        self.current_user: Optional[UserData] = None
        self._listeners: List[AuthListener] = []
        self._pending_full_name = ""
        self.on_auth_state_change(self._on_session_change)

    # ----------------------------- listeners ------------------------------ #

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str, session: Optional[BackendSession]) -> None:
        for cb in list(self._listeners):
            try:
                cb(event, session)
            except Exception:
                logger.exception("Auth listener failed on %s", event)

    def _on_session_change(self, event: str, session: Optional[BackendSession]) -> None:
        if session is None:
            self.current_user = None
            return
        self.current_user = self.resolve_profile(session)

    # ------------------------------ session ------------------------------- #

    def get_session(self) -> Optional[BackendSession]:
        return BackendSession.from_dict(self.storage.get(SESSION_KEY))

    def _store(self, event: str, session: Optional[BackendSession]) -> Optional[BackendSession]:
        if session is None:
            self.storage.pop(SESSION_KEY, None)
        else:
            self.storage[SESSION_KEY] = session.to_dict()
        self._emit(event, session)
        return session

    def load(self) -> UserData:
        """
        Page-load entry point: reuse the stored session or provision a guest,
        then resolve the profile again so balance changes show up. Never raises.
        """
        session = self.get_session()
        try:
            if session is None:
                self._pending_full_name = "Guest"
                try:
                    session = self.identity.sign_in(self.client, self.storage)
                    self._store(SIGNED_IN, session)
                finally:
                    self._pending_full_name = ""
            else:
                self.current_user = self.resolve_profile(session)
        except BackendError:
            logger.exception("Could not establish a backend session")
            self.current_user = fallback_user()
        return self.current_user or fallback_user(session.email if session else "")

    def sign_up(self, email: str, password: str, full_name: str = "") -> UserData:
        session = self.client.sign_up(email, password, {"full_name": full_name} if full_name else None)
        self._pending_full_name = full_name
        try:
            self._store(SIGNED_IN, session)
        finally:
            self._pending_full_name = ""
        return self.current_user or fallback_user(email)

    def sign_in(self, email: str, password: str) -> UserData:
        session = self.client.sign_in_with_password(email, password)
        self._store(SIGNED_IN, session)
        return self.current_user or fallback_user(email)

    def sign_out(self) -> None:
        session = self.get_session()
        if session is not None:
            try:
                self.client.sign_out(session.access_token)
            except BackendError:
                logger.warning("Remote sign-out failed; dropping the local session anyway")
        self._store(SIGNED_OUT, None)

    def refresh(self) -> Optional[UserData]:
        session = self.get_session()
        if session is None or not session.refresh_token:
            return None
        refreshed = self.client.refresh_session(session.refresh_token)
        self._store(TOKEN_REFRESHED, refreshed)
        return self.current_user

    # ------------------------------ profile ------------------------------- #

    def resolve_profile(self, session: BackendSession) -> UserData:
        """Select the profile row for this identity, creating it on first login."""
        try:
            row = self.client.select_profile(session.user_id, session.access_token)
            if row is None:
                row = self.client.insert_profile({
                    "id": session.user_id,
                    "user_id": generate_display_id(),
                    "full_name": self._pending_full_name,
                    "email": session.email,
                    "balance": 0,
                }, session.access_token)
            return UserData.from_profile(row)
        except BackendError:
            logger.exception("Profile lookup failed for %s", session.user_id)
            return fallback_user(session.email)


def build_bridge(storage: MutableMapping, client: Optional[BackendClient] = None) -> AuthBridge:
    return AuthBridge(
        client or BackendClient(),
        storage,
        identity_provider_for(getattr(settings, "AUTH_ANONYMOUS_MODE", "stored")),
    )
