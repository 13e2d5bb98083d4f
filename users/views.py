# users/views.py
import logging

from rest_framework import status
from rest_framework.response import Response

from drf_spectacular.utils import OpenApiResponse, extend_schema

from core.api import StorefrontAPIView

from .backend import BackendError
from .bridge import build_bridge
from .serializers import LoginRequestSchema, RegisterRequestSerializer, UserDataSerializer

logger = logging.getLogger(__name__)


class AuthBridgeView(StorefrontAPIView):
    """Storefront view with an `AuthBridge` bound to the visitor's session."""

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.bridge = build_bridge(request.session)

    def user_response(self, user, http_status=status.HTTP_200_OK) -> Response:
        # a fallback guest is per-request; the next load tries the backend again
        self.state.current_user = None if user.is_fallback else user
        return Response(UserDataSerializer(user).data, status=http_status)


# ---------------------------
# Current user
# ---------------------------
@extend_schema(
    description="Current profile. Provisions a guest identity when the visitor has no session.",
    request=None,
    responses={200: UserDataSerializer},
)
class MeView(AuthBridgeView):

    def get(self, request):
        return self.user_response(self.bridge.load())


# ---------------------------
# Register / Login / Logout
# ---------------------------
@extend_schema(
    description="Create an account on the auth backend and sign in.",
    request=RegisterRequestSerializer,
    responses={
        201: UserDataSerializer,
        400: OpenApiResponse(description="Validation or backend error"),
    },
)
class RegisterView(AuthBridgeView):

    def post(self, request):
        serializer = RegisterRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            user = self.bridge.sign_up(data["email"], data["password"], data.get("full_name", ""))
        except BackendError as e:
            logger.warning("Sign-up failed: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return self.user_response(user, status.HTTP_201_CREATED)


@extend_schema(
    description="Sign in with email & password.",
    request=LoginRequestSchema,
    responses={
        200: UserDataSerializer,
        401: OpenApiResponse(description="Invalid credentials"),
        400: OpenApiResponse(description="Bad request"),
    },
)
class LoginView(AuthBridgeView):

    def post(self, request):
        serializer = LoginRequestSchema(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = self.bridge.sign_in(serializer.validated_data["email"], serializer.validated_data["password"])
        except BackendError as e:
            logger.info("Sign-in rejected: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_401_UNAUTHORIZED)
        return self.user_response(user)


@extend_schema(description="Drop the backend session for this visitor.", request=None, responses={204: None})
class LogoutView(AuthBridgeView):

    def post(self, request):
        self.bridge.sign_out()
        self.state.current_user = None
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(description="Refresh the backend access token.", request=None, responses={200: UserDataSerializer})
class RefreshView(AuthBridgeView):

    def post(self, request):
        try:
            user = self.bridge.refresh()
        except BackendError as e:
            logger.warning("Token refresh failed: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        if user is None:
            return Response({"error": "No session to refresh"}, status=status.HTTP_400_BAD_REQUEST)
        return self.user_response(user)
