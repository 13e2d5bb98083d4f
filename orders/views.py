# orders/views.py
import logging

from rest_framework import status
from rest_framework.response import Response

from drf_spectacular.utils import extend_schema

from core.api import StorefrontAPIView
from core.state import order_flat_fee
from services import panel
from .serializers import (
    OrderDraftRequestSerializer,
    OrderFormSerializer,
    OrderRefreshAllSerializer,
    OrderSerializer,
    OrderVerifyRequestSerializer,
    RefreshErrorSerializer,
)
from .workflow import SELECTING, delete_order, find_order, refresh_all, refresh_status, total_charges

logger = logging.getLogger(__name__)


# ===================== Helpers =====================
def apply_draft(state, data) -> None:
    """Apply draft edits in the order a customer would make them."""
    form = state.order_form
    if form.step != SELECTING:
        return
    catalogue = state.ensure_catalogue()
    fee = order_flat_fee()
    if "category" in data:
        form.select_category(catalogue, data["category"], fee)
    if "service" in data:
        form.select_service(catalogue, data["service"], fee)
    if "link" in data:
        form.set_link(data["link"])
    if "quantity" in data:
        form.set_quantity(catalogue, data["quantity"], fee)


def order_list_payload(state):
    return {
        "orders": OrderSerializer(state.orders, many=True).data,
        "total_spent": str(total_charges(state.orders)),
    }


def refresh_one(state, order_id: str) -> Response:
    order = find_order(state.orders, order_id)
    if order is None:
        return Response({"error": "Order not found"}, status=status.HTTP_404_NOT_FOUND)
    result = refresh_status(state.orders, order_id, panel.order_status)
    if not result.ok:
        return Response({"error": result.message}, status=status.HTTP_400_BAD_REQUEST)
    return Response(OrderSerializer(order).data)


def delete_one(state, order_id: str) -> Response:
    if not delete_order(state.orders, order_id):
        return Response({"error": "Order not found"}, status=status.HTTP_404_NOT_FOUND)
    logger.info("Order %s removed from the local list", order_id)
    return Response(status=status.HTTP_204_NO_CONTENT)


def form_response(state, http_status=status.HTTP_200_OK, **extra) -> Response:
    data = {"form": OrderFormSerializer(state.order_form).data}
    data.update(extra)
    return Response(data, status=http_status)


# ===================== Orders =====================
@extend_schema(description="This visitor's orders (newest first) and the draft order form.")
class OrderListView(StorefrontAPIView):

    def get(self, request):
        self.state.ensure_catalogue()
        data = order_list_payload(self.state)
        data["form"] = OrderFormSerializer(self.state.order_form).data
        return Response(data)


@extend_schema(description="Edit the draft: category, service, link, quantity.",
               request=OrderDraftRequestSerializer, responses={200: OrderFormSerializer})
class OrderDraftView(StorefrontAPIView):

    def post(self, request):
        serializer = OrderDraftRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        apply_draft(self.state, serializer.validated_data)
        return form_response(self.state)


@extend_schema(description="selecting -> payment-pending. An incomplete draft is left as it is.",
               request=OrderDraftRequestSerializer, responses={200: OrderFormSerializer})
class OrderSubmitView(StorefrontAPIView):

    def post(self, request):
        serializer = OrderDraftRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        apply_draft(self.state, serializer.validated_data)
        self.state.order_form.submit(self.state.ensure_catalogue())
        return form_response(self.state)


@extend_schema(description="payment-pending -> selecting.", request=None, responses={200: OrderFormSerializer})
class OrderBackView(StorefrontAPIView):

    def post(self, request):
        self.state.order_form.back()
        return form_response(self.state)


@extend_schema(
    description="Confirm the payment transaction id and place the order with the provider.",
    request=OrderVerifyRequestSerializer,
    responses={201: OrderSerializer, 200: OrderFormSerializer},
)
class OrderVerifyView(StorefrontAPIView):

    def post(self, request):
        serializer = OrderVerifyRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        form = self.state.order_form
        catalogue = self.state.ensure_catalogue()
        if "transaction_id" in serializer.validated_data:
            form.set_transaction_id(serializer.validated_data["transaction_id"])

        result = form.verify(catalogue, self.state.orders, panel.add_order)
        if result is None:
            return form_response(self.state)
        if not result.ok:
            return form_response(self.state, status.HTTP_400_BAD_REQUEST, error=result.message)

        logger.info("Order %s placed", result.value)
        return form_response(
            self.state,
            status.HTTP_201_CREATED,
            order=OrderSerializer(self.state.orders[0]).data,
        )


@extend_schema(description="Back to dashboard: clear the draft and return to selecting.",
               request=None, responses={200: OrderFormSerializer})
class OrderResetView(StorefrontAPIView):

    def post(self, request):
        self.state.order_form.reset()
        self.state.order_form.recompute(self.state.ensure_catalogue(), order_flat_fee())
        return form_response(self.state)


@extend_schema(description="Re-query one order's status with the provider.", request=None, responses={200: OrderSerializer})
class OrderRefreshView(StorefrontAPIView):

    def post(self, request, order_id: str):
        return refresh_one(self.state, order_id)


@extend_schema(description="Remove one order from this visitor's list. Nothing is cancelled upstream.", responses={204: None})
class OrderDetailView(StorefrontAPIView):

    def delete(self, request, order_id: str):
        return delete_one(self.state, order_id)


@extend_schema(
    description="Refresh every order's status; failures are reported per order.",
    request=None,
    responses={200: OrderRefreshAllSerializer},
)
class OrderRefreshAllView(StorefrontAPIView):

    def post(self, request):
        errors = refresh_all(self.state.orders, panel.order_status)
        data = order_list_payload(self.state)
        data["errors"] = RefreshErrorSerializer(
            [{"order": order_id, "error": message} for order_id, message in errors], many=True,
        ).data
        return Response(data)
