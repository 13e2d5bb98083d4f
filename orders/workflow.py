# orders/workflow.py
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.utils import timezone

from core.money import ZERO, q, to_decimal
from core.results import Err, Result
from services.catalogue import Catalogue, Service

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
SELECTING = "selecting"
PAYMENT_PENDING = "payment-pending"
VERIFYING = "verifying"
SUCCESS = "success"

STEPS = (SELECTING, PAYMENT_PENDING, VERIFYING, SUCCESS)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_quantity(raw: Any) -> Optional[int]:
    """Leading integer of the input, like the browser's parseInt. None when absent."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    m = _LEADING_INT.match(str(raw))
    return int(m.group(1)) if m else None


def compute_charge(quantity: Any, service: Optional[Service], flat_fee: Decimal = ZERO) -> Decimal:
    """(quantity / 1000) x rate per 1000 (+ flat fee). Zero when either side is missing."""
    qty = parse_quantity(quantity)
    if service is None or not qty:
        return ZERO
    return q(Decimal(qty) / Decimal(1000) * service.rate_per_1000 + to_decimal(flat_fee))


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
@dataclass
class Order:
    id: str
    category: str
    service: str
    link: str
    quantity: int
    charge: Decimal
    transaction_id: str
    status: str = "pending"
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["charge"] = str(self.charge)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=str(data["id"]),
            category=data.get("category", ""),
            service=data.get("service", ""),
            link=data.get("link", ""),
            quantity=int(data.get("quantity") or 0),
            charge=Decimal(str(data.get("charge") or "0")),
            transaction_id=data.get("transaction_id", ""),
            status=data.get("status", "pending"),
            created_at=data.get("created_at", ""),
        )


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------
@dataclass
class OrderWorkflow:
    """
    Draft order held per visitor.

    selecting -> payment-pending -> verifying -> success, with `back` from
    payment-pending. `charge` is recomputed on every service or quantity change.
    """

    step: str = SELECTING
    category_id: Optional[str] = None
    service_id: Optional[str] = None
    link: str = ""
    quantity: str = ""
    transaction_id: str = ""
    charge: Decimal = ZERO
    last_order_id: Optional[str] = None

    # ----------------------------- selection ------------------------------ #

    def selected_service(self, catalogue: Catalogue) -> Optional[Service]:
        if self.category_id is None or self.service_id is None:
            return None
        return catalogue.find_service(self.category_id, self.service_id)

    def apply_default_selection(self, catalogue: Catalogue, flat_fee: Decimal = ZERO) -> None:
        cat, svc = catalogue.default_selection()
        self.category_id = cat.id if cat else None
        self.service_id = svc.id if svc else None
        self.recompute(catalogue, flat_fee)

    def select_category(self, catalogue: Catalogue, category_id: str, flat_fee: Decimal = ZERO) -> bool:
        cat = catalogue.find_category(category_id)
        if cat is None:
            return False
        self.category_id = cat.id
        self.service_id = cat.services[0].id if cat.services else None
        self.recompute(catalogue, flat_fee)
        return True

    def select_service(self, catalogue: Catalogue, service_id: str, flat_fee: Decimal = ZERO) -> bool:
        if self.category_id is None or catalogue.find_service(self.category_id, service_id) is None:
            return False
        self.service_id = str(service_id)
        self.recompute(catalogue, flat_fee)
        return True

    def set_quantity(self, catalogue: Catalogue, quantity: Any, flat_fee: Decimal = ZERO) -> None:
        self.quantity = "" if quantity is None else str(quantity)
        self.recompute(catalogue, flat_fee)

    def set_link(self, link: str) -> None:
        self.link = (link or "").strip()

    def set_transaction_id(self, transaction_id: str) -> None:
        self.transaction_id = (transaction_id or "").strip().upper()

    def recompute(self, catalogue: Catalogue, flat_fee: Decimal = ZERO) -> Decimal:
        self.charge = compute_charge(self.quantity, self.selected_service(catalogue), flat_fee)
        return self.charge

    # ----------------------------- transitions ---------------------------- #

    def can_submit(self, catalogue: Catalogue) -> bool:
        svc = self.selected_service(catalogue)
        qty = parse_quantity(self.quantity)
        # upper bound (svc.max) is shown to the customer but not enforced here
        return bool(self.link) and svc is not None and qty is not None and qty >= svc.min

    def submit(self, catalogue: Catalogue) -> bool:
        """selecting -> payment-pending. A failed guard is a silent no-op."""
        if self.step != SELECTING or not self.can_submit(catalogue):
            return False
        self.step = PAYMENT_PENDING
        return True

    def back(self) -> bool:
        if self.step != PAYMENT_PENDING:
            return False
        self.step = SELECTING
        return True

    def verify(
        self,
        catalogue: Catalogue,
        orders: List[Order],
        place_order: Callable[[str, str, int], Result],
    ) -> Optional[Result]:
        """
        payment-pending -> verifying -> success|payment-pending.

        Returns None when the guard fails (nothing happened), otherwise the
        provider result. Only an Ok result touches `orders`.
        """
        svc = self.selected_service(catalogue)
        if self.step != PAYMENT_PENDING or not self.transaction_id or svc is None:
            return None

        qty = parse_quantity(self.quantity) or 0
        self.step = VERIFYING
        result = place_order(svc.id, self.link, qty)

        if not result.ok:
            logger.info("Order placement rejected for service %s: %s", svc.id, result.message)
            self.step = PAYMENT_PENDING
            return result

        cat = catalogue.find_category(self.category_id) if self.category_id else None
        orders.insert(0, Order(
            id=str(result.value),
            category=cat.name if cat else "",
            service=svc.name,
            link=self.link,
            quantity=qty,
            charge=self.charge,
            transaction_id=self.transaction_id,
            status="pending",
            created_at=timezone.now().isoformat(),
        ))
        self.last_order_id = str(result.value)
        self.step = SUCCESS
        return result

    def reset(self) -> None:
        """Back to dashboard: clear the form, keep the service selection."""
        self.step = SELECTING
        self.link = ""
        self.quantity = ""
        self.transaction_id = ""
        self.charge = ZERO
        self.last_order_id = None

    # ----------------------------- persistence ---------------------------- #

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["charge"] = str(self.charge)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OrderWorkflow":
        if not data:
            return cls()
        step = data.get("step") if data.get("step") in STEPS else SELECTING
        return cls(
            step=step,
            category_id=data.get("category_id"),
            service_id=data.get("service_id"),
            link=data.get("link", ""),
            quantity=data.get("quantity", ""),
            transaction_id=data.get("transaction_id", ""),
            charge=Decimal(str(data.get("charge") or "0")),
            last_order_id=data.get("last_order_id"),
        )


# ---------------------------------------------------------------------------
# Order list operations
# ---------------------------------------------------------------------------
def find_order(orders: List[Order], order_id: str) -> Optional[Order]:
    return next((o for o in orders if o.id == str(order_id)), None)


def refresh_status(orders: List[Order], order_id: str, fetch_status: Callable[[str], Result]) -> Result:
    """One provider call; status is overwritten (lower-cased) only on Ok."""
    order = find_order(orders, order_id)
    if order is None:
        return Err("Order not found")
    result = fetch_status(order.id)
    if result.ok:
        order.status = str(result.value).lower()
    return result


def refresh_all(orders: List[Order], fetch_status: Callable[[str], Result]) -> List[Tuple[str, str]]:
    """Refresh every order independently. Returns (order_id, message) per failure."""
    errors: List[Tuple[str, str]] = []
    for order in list(orders):
        try:
            result = refresh_status(orders, order.id, fetch_status)
        except Exception as e:  # keep going for the remaining orders
            logger.exception("Status refresh crashed for order %s", order.id)
            result = Err(str(e) or "Status refresh failed")
        if not result.ok:
            errors.append((order.id, result.message))
    return errors


def delete_order(orders: List[Order], order_id: str) -> bool:
    """Local removal only; nothing is cancelled upstream."""
    before = len(orders)
    orders[:] = [o for o in orders if o.id != str(order_id)]
    return len(orders) != before


def total_charges(orders: List[Order]) -> Decimal:
    return q(sum((o.charge for o in orders), ZERO))
