# backoffice/views.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from rest_framework.response import Response

from drf_spectacular.utils import OpenApiParameter, extend_schema

from core.api import AdminViewEnabled, StorefrontAPIView
from orders.serializers import OrderSerializer
from orders.views import delete_one, refresh_one
from orders.workflow import total_charges
from users.backend import BackendClient, BackendError
from users.bridge import build_bridge

logger = logging.getLogger(__name__)

PROFILE_SEARCH_FIELDS = ("user_id", "full_name", "email")


# ===================== Helpers =====================
def filter_profiles(rows: List[Dict[str, Any]], search: str) -> List[Dict[str, Any]]:
    """Case-insensitive substring match on display id, name and email."""
    needle = (search or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if any(needle in str(row.get(f) or "").lower() for f in PROFILE_SEARCH_FIELDS)
    ]


def load_profiles(request, client: Optional[BackendClient] = None) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """All `profiles` rows, or ([], message) when the backend fails."""
    bridge = build_bridge(request.session, client)
    session = bridge.get_session()
    try:
        rows = bridge.client.select_profiles(session.access_token if session else None)
    except BackendError as e:
        logger.exception("Could not list profiles")
        return [], str(e)
    return rows, None


def _profile_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "user_id": row.get("user_id") or "",
        "full_name": row.get("full_name") or "",
        "email": row.get("email") or "",
        "balance": str(row.get("balance") if row.get("balance") is not None else 0),
    }


class AdminAPIView(StorefrontAPIView):
    permission_classes = [AdminViewEnabled]


# ===================== Toggle =====================
@extend_schema(description="Flip between the customer and the admin view.", request=None)
class ToggleViewView(StorefrontAPIView):

    def post(self, request):
        view = self.state.toggle_view()
        logger.info("Storefront view switched to %s", view)
        return Response({"view": view})


# ===================== Read-only projections =====================
@extend_schema(description="Order count, charges, pending orders, users and payment requests.")
class AdminSummaryView(AdminAPIView):

    def get(self, request):
        orders = self.state.orders
        rows, error = load_profiles(request)
        data = {
            "total_orders": len(orders),
            "total_charges": str(total_charges(orders)),
            "pending_orders": sum(1 for o in orders if o.status == "pending"),
            "total_users": len(rows),
            "payment_requests": len(self.state.payment_history),
        }
        if error:
            data["error"] = error
        return Response(data)


@extend_schema(
    description="Backend user profiles, optionally filtered.",
    parameters=[OpenApiParameter("search", str, description="Matches user id, name or email")],
)
class AdminUsersView(AdminAPIView):

    def get(self, request):
        rows, error = load_profiles(request)
        users = [_profile_row(r) for r in filter_profiles(rows, request.query_params.get("search", ""))]
        data = {"count": len(users), "results": users}
        if error:
            data["error"] = error
        return Response(data)


@extend_schema(description="Every order held for this visitor.", responses={200: OrderSerializer(many=True)})
class AdminOrdersView(AdminAPIView):

    def get(self, request):
        return Response(OrderSerializer(self.state.orders, many=True).data)


@extend_schema(description="Re-query one order's status.", request=None, responses={200: OrderSerializer})
class AdminOrderRefreshView(AdminAPIView):

    def post(self, request, order_id: str):
        return refresh_one(self.state, order_id)


@extend_schema(description="Delete one order locally.", responses={204: None})
class AdminOrderDeleteView(AdminAPIView):

    def delete(self, request, order_id: str):
        return delete_one(self.state, order_id)
