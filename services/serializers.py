from __future__ import annotations

from decimal import ROUND_HALF_UP

from rest_framework import serializers


# ---------------------------------------------------------------------------
# Read serializers (catalogue dataclasses -> JSON)
# ---------------------------------------------------------------------------
class ServiceSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    rate_per_1000 = serializers.DecimalField(max_digits=14, decimal_places=2, rounding=ROUND_HALF_UP)
    min = serializers.IntegerField()
    max = serializers.IntegerField()
    description = serializers.ListField(child=serializers.CharField())


class CategorySerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    tag = serializers.CharField()
    services = ServiceSerializer(many=True)


class CatalogueSerializer(serializers.Serializer):
    categories = CategorySerializer(many=True)
    load_error = serializers.CharField(allow_null=True)


class BalanceSerializer(serializers.Serializer):
    balance = serializers.DecimalField(max_digits=14, decimal_places=2, rounding=ROUND_HALF_UP)
    provider_balance = serializers.DecimalField(max_digits=14, decimal_places=4)
    currency = serializers.CharField()


# ---------------------------------------------------------------------------
# Schema only
# ---------------------------------------------------------------------------
class ProxyRequestSchema(serializers.Serializer):
    action = serializers.CharField(help_text="Provider action code, e.g. balance, services, add, status.")
