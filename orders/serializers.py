# orders/serializers.py
from decimal import ROUND_HALF_UP

from rest_framework import serializers

from .workflow import STEPS


class OrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    category = serializers.CharField()
    service = serializers.CharField()
    link = serializers.CharField()
    quantity = serializers.IntegerField()
    charge = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_id = serializers.CharField()
    status = serializers.CharField()
    created_at = serializers.CharField()


class OrderFormSerializer(serializers.Serializer):
    step = serializers.ChoiceField(choices=STEPS)
    category_id = serializers.CharField(allow_null=True)
    service_id = serializers.CharField(allow_null=True)
    link = serializers.CharField(allow_blank=True)
    quantity = serializers.CharField(allow_blank=True)
    transaction_id = serializers.CharField(allow_blank=True)
    charge = serializers.DecimalField(max_digits=12, decimal_places=2, rounding=ROUND_HALF_UP)
    last_order_id = serializers.CharField(allow_null=True)


# ---- Request bodies ----

class OrderDraftRequestSerializer(serializers.Serializer):
    """Every field is optional; only the ones sent are applied, in this order."""

    category = serializers.CharField(required=False)
    service = serializers.CharField(required=False)
    link = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    quantity = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class OrderVerifyRequestSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(required=False, allow_blank=True)


class RefreshErrorSerializer(serializers.Serializer):
    order = serializers.CharField()
    error = serializers.CharField()


class OrderRefreshAllSerializer(serializers.Serializer):
    orders = OrderSerializer(many=True)
    total_spent = serializers.DecimalField(max_digits=12, decimal_places=2)
    errors = RefreshErrorSerializer(many=True)
