# core/api.py
from __future__ import annotations

from rest_framework.permissions import AllowAny, BasePermission
from rest_framework.views import APIView

from core.state import StorefrontState, load_state, save_state


class StorefrontAPIView(APIView):
    """
    Base view for the storefront endpoints.

    The visitor's `StorefrontState` is read from the session before the
    handler runs and written back once the response is final, whatever the
    handler returned.
    """

    permission_classes = [AllowAny]
    state: StorefrontState

    def initial(self, request, *args, **kwargs):
        self.state = load_state(request)
        super().initial(request, *args, **kwargs)

    def finalize_response(self, request, response, *args, **kwargs):
        state = getattr(self, "state", None)
        if state is not None:
            save_state(request, state)
        return super().finalize_response(request, response, *args, **kwargs)


class AdminViewEnabled(BasePermission):
    """The only gate on the back office: the visitor's view toggle."""

    message = "Admin view is not enabled."

    def has_permission(self, request, view):
        state = getattr(view, "state", None) or load_state(request)
        return state.is_admin_view
