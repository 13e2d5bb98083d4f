# payments/serializers.py
from rest_framework import serializers

from .workflow import METHODS, STATUS_CHOICES, STEPS


class PaymentRecordSerializer(serializers.Serializer):
    id = serializers.CharField()
    method = serializers.ChoiceField(choices=METHODS)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_id = serializers.CharField()
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    created_at = serializers.CharField()


class FundsFormSerializer(serializers.Serializer):
    step = serializers.ChoiceField(choices=STEPS)
    method = serializers.ChoiceField(choices=METHODS)
    amount = serializers.CharField(allow_blank=True)
    transaction_id = serializers.CharField(allow_blank=True)


# ---- Request bodies ----

class FundsMethodRequestSerializer(serializers.Serializer):
    method = serializers.CharField()


class FundsAmountRequestSerializer(serializers.Serializer):
    amount = serializers.CharField(allow_blank=True)


class FundsSubmitRequestSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(required=False, allow_blank=True)
