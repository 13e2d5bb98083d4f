from django.conf import settings
from django.urls import path, include
from django.http import JsonResponse

# DRF Spectacular (API docs)
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView

from services.views import ProviderProxyView


def health_view(_request):
    return JsonResponse({"status": "ok", "app": "Top Up BD", "version": "1.0"})


def support_view(_request):
    return JsonResponse({
        "telegram": settings.SUPPORT_TELEGRAM_URL,
        "whatsapp": settings.SUPPORT_WHATSAPP_URL,
        "payment_numbers": settings.PAYMENT_NUMBERS,
    })


urlpatterns = [
    # --- Provider proxy (browser-compatible contract) ---
    path("api/proxy", ProviderProxyView.as_view(), name="provider-proxy"),

    # --- Storefront ---
    path("api/services/", include("services.urls")),
    path("api/orders/", include("orders.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/users/", include("users.urls")),
    path("api/backoffice/", include("backoffice.urls")),

    # --- Health / support ---
    path("api/health/", health_view, name="health"),
    path("api/support/", support_view, name="support"),

    # --- API Schema + Docs ---
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
