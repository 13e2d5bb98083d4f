# payments/views.py
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

from drf_spectacular.utils import extend_schema

from core.api import StorefrontAPIView
from core.money import q, to_decimal
from .serializers import (
    FundsAmountRequestSerializer,
    FundsFormSerializer,
    FundsMethodRequestSerializer,
    FundsSubmitRequestSerializer,
    PaymentRecordSerializer,
)
from .workflow import FundsValidationError

# ---- helpers ----------------------------------------------------------------

def _surcharge():
    return to_decimal(getattr(settings, "FUNDS_SURCHARGE", 7))


def _minimum():
    return to_decimal(getattr(settings, "FUNDS_MINIMUM", 20))


def funds_payload(state):
    form = state.funds_form
    total = form.total_payable(_surcharge())
    return {
        "form": FundsFormSerializer(form).data,
        "payment_number": settings.PAYMENT_NUMBERS.get(form.method, ""),
        "payment_numbers": dict(settings.PAYMENT_NUMBERS),
        "surcharge": str(q(_surcharge())),
        "minimum": str(q(_minimum())),
        "total_payable": str(total) if total is not None else None,
        "history": PaymentRecordSerializer(state.payment_history, many=True).data,
    }


def _error(message: str, state) -> Response:
    data = funds_payload(state)
    data["error"] = message
    return Response(data, status=status.HTTP_400_BAD_REQUEST)


# ---- views ------------------------------------------------------------------

@extend_schema(description="Top-up form state, payment numbers and request history.")
class FundsView(StorefrontAPIView):

    def get(self, request):
        return Response(funds_payload(self.state))


@extend_schema(description="Pick the mobile-money method (nagad | bkash).", request=FundsMethodRequestSerializer)
class FundsMethodView(StorefrontAPIView):

    def post(self, request):
        serializer = FundsMethodRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self.state.funds_form.choose_method(serializer.validated_data["method"])
        except FundsValidationError as e:
            return _error(str(e), self.state)
        return Response(funds_payload(self.state))


@extend_schema(description="Enter the amount and move on to transaction-id entry.", request=FundsAmountRequestSerializer)
class FundsAmountView(StorefrontAPIView):

    def post(self, request):
        serializer = FundsAmountRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        form = self.state.funds_form
        form.set_amount(serializer.validated_data["amount"])
        try:
            form.next_step(_minimum())
        except FundsValidationError as e:
            return _error(str(e), self.state)
        return Response(funds_payload(self.state))


@extend_schema(description="verify-entry -> amount-entry.", request=None)
class FundsBackView(StorefrontAPIView):

    def post(self, request):
        self.state.funds_form.back()
        return Response(funds_payload(self.state))


@extend_schema(
    description=(
        "Record a pending top-up request for manual reconciliation. "
        "Nothing is verified with the payment provider."
    ),
    request=FundsSubmitRequestSerializer,
    responses={201: PaymentRecordSerializer},
)
class FundsSubmitView(StorefrontAPIView):

    def post(self, request):
        serializer = FundsSubmitRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        form = self.state.funds_form
        if "transaction_id" in serializer.validated_data:
            form.set_transaction_id(serializer.validated_data["transaction_id"])

        try:
            record = form.submit(
                self.state.payment_history,
                minimum=_minimum(),
                delay=float(getattr(settings, "FUNDS_PROCESSING_DELAY", 0)),
            )
        except FundsValidationError as e:
            return _error(str(e), self.state)
        data = funds_payload(self.state)
        if record is None:
            return Response(data)
        data["record"] = PaymentRecordSerializer(record).data
        return Response(data, status=status.HTTP_201_CREATED)
