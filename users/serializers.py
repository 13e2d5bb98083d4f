# users/serializers.py
from rest_framework import serializers


class UserDataSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    email = serializers.CharField(allow_blank=True)
    full_name = serializers.CharField(allow_blank=True)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class RegisterRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=120)


# ---- Schemas for Swagger docs ----

class LoginRequestSchema(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
