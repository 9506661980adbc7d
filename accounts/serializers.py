from django.contrib.auth import get_user_model
from rest_framework import serializers

from loans.calculators import compute_credit_snapshot
from loans.serializers import CreditSnapshotSerializer

User = get_user_model()


class BaseUserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(max_length=128, min_length=5, write_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "password",
            "username",
            "first_name",
            "last_name",
            "profile_image_url",
            "phone_number",
            "account_number",
            "xp",
            "level",
            "membership_paid",
            "on_time_payments",
            "total_payments",
            "is_banned",
            "is_system_admin",
            "is_active",
            "reference",
            "created_at",
            "updated_at",
        )
        read_only_fields = (
            "id",
            "xp",
            "level",
            "membership_paid",
            "on_time_payments",
            "total_payments",
            "is_banned",
            "is_system_admin",
            "is_active",
            "reference",
            "created_at",
            "updated_at",
        )

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=["password"])
        return instance


class CurrentUserSerializer(BaseUserSerializer):
    credit = serializers.SerializerMethodField()

    class Meta(BaseUserSerializer.Meta):
        fields = BaseUserSerializer.Meta.fields + ("credit",)

    def get_credit(self, obj):
        return CreditSnapshotSerializer(compute_credit_snapshot(obj)).data


class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


"""
Admin serializers
"""


class XPAdjustmentSerializer(serializers.Serializer):
    xp_change = serializers.IntegerField()

    def validate_xp_change(self, value):
        if value == 0:
            raise serializers.ValidationError("XP change must not be zero.")
        return value


class BanSerializer(serializers.Serializer):
    is_banned = serializers.BooleanField()


class MembershipSerializer(serializers.Serializer):
    membership_paid = serializers.BooleanField()
