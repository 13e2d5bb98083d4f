from __future__ import annotations

from django.apps import AppConfig
from django.conf import settings
from django.core.checks import Warning, register

DEFAULT_PANEL_KEY = "change-me"
INSECURE_SECRET_PREFIX = "django-insecure-"


class ServicesConfig(AppConfig):
    name = "services"
    verbose_name = "Top Up BD Services"


# ---------------------------------------------------------------------------
# System checks: surface config issues early with `manage.py check`
# ---------------------------------------------------------------------------
@register()
def services_system_checks(app_configs, **kwargs):
    messages = []
    production = str(getattr(settings, "ENV", "development")).lower() == "production"

    # 1) Panel credentials
    panel_key = getattr(settings, "PANEL_API_KEY", "")
    if not panel_key or panel_key == DEFAULT_PANEL_KEY:
        messages.append(
            Warning(
                "PANEL_API_KEY is not set; provider calls will be rejected upstream.",
                id="services.W001",
                hint="Set PANEL_API_KEY in the environment or .env.",
            )
        )

    # 2) Secret key left at the development default
    if production and str(getattr(settings, "SECRET_KEY", "")).startswith(INSECURE_SECRET_PREFIX):
        messages.append(
            Warning(
                "SECRET_KEY is the development default while ENV=production.",
                id="services.W002",
                hint="Set a long random SECRET_KEY for deployments.",
            )
        )

    # 3) Auth/profile backend
    if not getattr(settings, "SUPABASE_URL", ""):
        messages.append(
            Warning(
                "SUPABASE_URL is empty; every visitor will get the offline guest profile.",
                id="services.W003",
                hint="Set SUPABASE_URL and SUPABASE_ANON_KEY.",
            )
        )

    # 4) The proxy relays any action with the operator's key
    if production:
        messages.append(
            Warning(
                "/api/proxy forwards any provider action with the panel key and has no access control.",
                id="services.W004",
                hint="Restrict it at the edge (allow-listed origins, auth proxy) before going live.",
            )
        )

    return messages
