# payments/workflow.py
from __future__ import annotations

import logging
import secrets
import string
import time
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone

from core.money import q, to_decimal

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Choices
# ---------------------------------------------------------------------------
METHOD_NAGAD = "nagad"
METHOD_BKASH = "bkash"
METHODS = (METHOD_NAGAD, METHOD_BKASH)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_REJECTED = "rejected"
STATUS_CHOICES = (STATUS_PENDING, STATUS_COMPLETED, STATUS_REJECTED)

AMOUNT_ENTRY = "amount-entry"
VERIFY_ENTRY = "verify-entry"
SUBMITTED = "submitted"
STEPS = (AMOUNT_ENTRY, VERIFY_ENTRY, SUBMITTED)

_ID_ALPHABET = string.ascii_uppercase + string.digits


class FundsValidationError(ValueError):
    """The visitor gets this message back; the workflow state is unchanged."""


def generate_record_id(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def below_minimum(minimum: Any) -> FundsValidationError:
    return FundsValidationError(f"Minimum amount is {to_decimal(minimum).normalize():f} BDT")


def parse_amount(raw: Any) -> Optional[Decimal]:
    if raw is None or str(raw).strip() == "":
        return None
    try:
        return to_decimal(raw)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
@dataclass
class PaymentRecord:
    id: str
    method: str
    amount: Decimal
    transaction_id: str
    status: str = STATUS_PENDING
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["amount"] = str(self.amount)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            id=data["id"],
            method=data.get("method", METHOD_NAGAD),
            amount=Decimal(str(data.get("amount") or "0")),
            transaction_id=data.get("transaction_id", ""),
            status=data.get("status", STATUS_PENDING),
            created_at=data.get("created_at", ""),
        )


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------
@dataclass
class FundsWorkflow:
    """
    Manual top-up request: amount-entry -> verify-entry -> submitted -> amount-entry.

    Nothing here talks to a payment provider. A submitted request is only a
    pending record for the operator to reconcile by hand.
    """

    step: str = AMOUNT_ENTRY
    method: str = METHOD_NAGAD
    amount: str = ""
    transaction_id: str = ""

    def choose_method(self, method: str) -> None:
        m = (method or "").strip().lower()
        if m not in METHODS:
            raise FundsValidationError(f"Unsupported payment method '{method}'. Choose one of: {', '.join(METHODS)}.")
        self.method = m
        self.step = AMOUNT_ENTRY

    def set_amount(self, amount: Any) -> None:
        """Only editable in amount-entry; later steps keep the amount that passed the minimum."""
        if self.step != AMOUNT_ENTRY:
            return
        self.amount = "" if amount is None else str(amount).strip()

    def set_transaction_id(self, transaction_id: str) -> None:
        self.transaction_id = (transaction_id or "").strip().upper()

    def total_payable(self, surcharge: Decimal) -> Optional[Decimal]:
        amt = parse_amount(self.amount)
        return q(amt + to_decimal(surcharge)) if amt is not None else None

    def next_step(self, minimum: Decimal) -> None:
        """amount-entry -> verify-entry, guarded by the minimum top-up."""
        if self.step != AMOUNT_ENTRY:
            return
        amt = parse_amount(self.amount)
        if amt is None or amt < to_decimal(minimum):
            raise below_minimum(minimum)
        self.step = VERIFY_ENTRY

    def back(self) -> None:
        if self.step == VERIFY_ENTRY:
            self.step = AMOUNT_ENTRY

    def submit(
        self,
        history: List[PaymentRecord],
        minimum: Decimal = Decimal("0"),
        delay: float = 0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Optional[PaymentRecord]:
        """
        verify-entry -> submitted -> amount-entry.

        Returns the new pending record, or None when the guard fails
        (missing amount/transaction id); a failed guard changes nothing.
        Raises FundsValidationError when the amount is under `minimum`.
        """
        amt = parse_amount(self.amount)
        if self.step != VERIFY_ENTRY or amt is None or not self.transaction_id:
            return None
        if amt < to_decimal(minimum):
            raise below_minimum(minimum)

        self.step = SUBMITTED
        if delay and delay > 0:
            sleep(delay)

        record = PaymentRecord(
            id=generate_record_id(),
            method=self.method,
            amount=q(amt),
            transaction_id=self.transaction_id,
            status=STATUS_PENDING,
            created_at=timezone.now().isoformat(),
        )
        history.insert(0, record)
        logger.info(
            "Fund request %s submitted via %s for %s BDT (awaiting manual reconciliation)",
            record.id, record.method, record.amount,
        )

        self.amount = ""
        self.transaction_id = ""
        self.step = AMOUNT_ENTRY
        return record

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FundsWorkflow":
        if not data:
            return cls()
        return cls(
            step=data.get("step") if data.get("step") in STEPS else AMOUNT_ENTRY,
            method=data.get("method") if data.get("method") in METHODS else METHOD_NAGAD,
            amount=data.get("amount", ""),
            transaction_id=data.get("transaction_id", ""),
        )
