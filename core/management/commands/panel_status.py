# core/management/commands/panel_status.py
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.money import q, to_decimal
from services import panel
from services.catalogue import fetch_catalogue


class Command(BaseCommand):
    help = "Check the provider panel: account balance and catalogue size."

    def add_arguments(self, parser):
        parser.add_argument("--skip-catalogue", action="store_true",
                            help="Only query the balance (the services list can be large)")

    def handle(self, *args, **opts):
        balance = panel.get_balance()
        if not balance.ok:
            raise CommandError(f"Provider unreachable or rejected the key: {balance.message}")

        bdt = q(balance.value * to_decimal(settings.USD_TO_BDT))
        self.stdout.write(f"Balance: {balance.value} USD ({bdt} BDT at {settings.USD_TO_BDT})")

        if opts["skip_catalogue"]:
            return

        catalogue = fetch_catalogue()
        if catalogue.load_error:
            self.stderr.write(f"Catalogue failed to load: {catalogue.load_error}")
            raise CommandError("Catalogue unavailable")

        self.stdout.write(self.style.SUCCESS(
            f"Done. {catalogue.service_count()} service(s) in {len(catalogue.categories)} categor"
            f"{'y' if len(catalogue.categories) == 1 else 'ies'}."
        ))
