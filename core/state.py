# core/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings

from core.money import to_decimal
from orders.workflow import Order, OrderWorkflow
from payments.workflow import FundsWorkflow, PaymentRecord
from services.catalogue import Catalogue, shared_catalogue
from users.bridge import UserData

STATE_SESSION_KEY = "storefront"

VIEW_USER = "user"
VIEW_ADMIN = "admin"


def order_flat_fee() -> Decimal:
    return to_decimal(getattr(settings, "ORDER_FLAT_FEE", 0))


@dataclass
class StorefrontState:
    """
    Everything one visitor's storefront holds between requests.

    Lives in the visitor's session only: nothing here is written to a
    database, and it is gone when the session expires. The catalogue itself
    is shared through the cache and is not part of the session copy.
    """

    catalogue: Optional[Catalogue] = None
    catalogue_loaded: bool = False
    order_form: OrderWorkflow = field(default_factory=OrderWorkflow)
    funds_form: FundsWorkflow = field(default_factory=FundsWorkflow)
    orders: List[Order] = field(default_factory=list)
    payment_history: List[PaymentRecord] = field(default_factory=list)
    view: str = VIEW_USER
    current_user: Optional[UserData] = None

    @property
    def is_admin_view(self) -> bool:
        return self.view == VIEW_ADMIN

    def toggle_view(self) -> str:
        self.view = VIEW_USER if self.view == VIEW_ADMIN else VIEW_ADMIN
        return self.view

    def ensure_catalogue(self, force: bool = False) -> Catalogue:
        """
        Resolve the shared catalogue once per request. The visitor's first
        load (or a forced one, or the first after a failed load) points the
        order form at the first category/service, as a fresh page load does.
        """
        if self.catalogue is not None and not force:
            return self.catalogue
        first_load = force or not self.catalogue_loaded
        self.catalogue = shared_catalogue(force)
        if first_load:
            self.order_form.apply_default_selection(self.catalogue, order_flat_fee())
        self.catalogue_loaded = not self.catalogue.load_error
        return self.catalogue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalogue_loaded": self.catalogue_loaded,
            "order_form": self.order_form.to_dict(),
            "funds_form": self.funds_form.to_dict(),
            "orders": [o.to_dict() for o in self.orders],
            "payment_history": [p.to_dict() for p in self.payment_history],
            "view": self.view,
            "current_user": self.current_user.to_dict() if self.current_user else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StorefrontState":
        data = data or {}
        return cls(
            catalogue_loaded=bool(data.get("catalogue_loaded")),
            order_form=OrderWorkflow.from_dict(data.get("order_form")),
            funds_form=FundsWorkflow.from_dict(data.get("funds_form")),
            orders=[Order.from_dict(o) for o in data.get("orders") or []],
            payment_history=[PaymentRecord.from_dict(p) for p in data.get("payment_history") or []],
            view=VIEW_ADMIN if data.get("view") == VIEW_ADMIN else VIEW_USER,
            current_user=UserData.from_dict(data.get("current_user")),
        )


def load_state(request) -> StorefrontState:
    return StorefrontState.from_dict(request.session.get(STATE_SESSION_KEY))


def save_state(request, state: StorefrontState) -> None:
    request.session[STATE_SESSION_KEY] = state.to_dict()
