# services/views.py
import logging

from django.conf import settings
from django.http import HttpResponse

from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from core.api import StorefrontAPIView
from core.money import q, to_decimal
from . import panel
from .serializers import BalanceSerializer, CatalogueSerializer, ProxyRequestSchema

logger = logging.getLogger(__name__)


# ===================== Proxy =====================
CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


@extend_schema(
    description=(
        "Forward one provider action. The panel key is injected server-side; every "
        "other field is passed through as a form field."
    ),
    request=ProxyRequestSchema,
    responses={200: OpenApiResponse(description="Provider JSON, relayed as-is")},
)
class ProviderProxyView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    parser_classes = [JSONParser]

    def post(self, request):
        payload = request.data
        if not isinstance(payload, dict):
            return Response({"error": "Request body must be a JSON object"}, status=status.HTTP_400_BAD_REQUEST)

        params = dict(payload)
        action = params.pop("action", "")
        try:
            body = panel.post_action("" if action is None else action, params)
        except panel.InvalidProviderResponse:
            return Response({"error": "Invalid response from provider API"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        except panel.ProviderError:
            logger.exception("Proxy call for action %r failed", action)
            return Response({"error": "Internal Server Error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(body, status=status.HTTP_200_OK)

    def options(self, request, *args, **kwargs):
        return HttpResponse(status=status.HTTP_200_OK)

    def http_method_not_allowed(self, request, *args, **kwargs):
        return Response({"error": "Method not allowed"}, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def handle_exception(self, exc):
        # malformed JSON never reaches `post`
        if isinstance(exc, ParseError):
            return Response({"error": "Request body must be a JSON object"}, status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        for header, value in CORS_HEADERS.items():
            response[header] = value
        return response


# ===================== Catalogue =====================
@extend_schema(description="Grouped, priced catalogue for this visitor. POST forces a refetch.",
               responses={200: CatalogueSerializer})
class CatalogueView(StorefrontAPIView):

    def get(self, request):
        catalogue = self.state.ensure_catalogue()
        return Response(CatalogueSerializer(catalogue).data)

    def post(self, request):
        catalogue = self.state.ensure_catalogue(force=True)
        return Response(CatalogueSerializer(catalogue).data)


@extend_schema(description="Provider account balance, converted to BDT.", responses={200: BalanceSerializer})
class BalanceView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        result = panel.get_balance()
        if not result.ok:
            return Response({"error": result.message}, status=status.HTTP_400_BAD_REQUEST)

        usd = result.value
        data = {
            "balance": q(usd * to_decimal(settings.USD_TO_BDT)),
            "provider_balance": usd,
            "currency": "BDT",
        }
        return Response(BalanceSerializer(data).data)
