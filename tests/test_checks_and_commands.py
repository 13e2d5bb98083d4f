from __future__ import annotations

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from services.apps import services_system_checks


def _ids(settings):
    return {m.id for m in services_system_checks(None)}


def test_checks_are_quiet_for_a_configured_dev_setup(settings):
    settings.ENV = "development"
    assert _ids(settings) == set()


def test_checks_flag_default_key_and_missing_backend(settings):
    settings.PANEL_API_KEY = "change-me"
    settings.SUPABASE_URL = ""

    assert _ids(settings) == {"services.W001", "services.W003"}


def test_checks_flag_insecure_secret_and_open_proxy_in_production(settings):
    settings.ENV = "production"
    settings.SECRET_KEY = "django-insecure-topupbd-dev-only"

    assert _ids(settings) == {"services.W002", "services.W004"}


def test_panel_status_prints_balance_and_catalogue(fake_panel):
    out = StringIO()

    call_command("panel_status", stdout=out)

    text = out.getvalue()
    assert "12.5000 USD (1500.00 BDT" in text
    assert "3 service(s) in 2 categories" in text


def test_panel_status_fails_when_provider_is_down(fake_panel):
    fake_panel.fail("balance")

    with pytest.raises(CommandError):
        call_command("panel_status", stdout=StringIO())
