from rest_framework import serializers

from systemsettings.models import SystemSetting
from systemsettings.resolver import SettingsResolver, validate_setting_value
from systemsettings.schema import SETTING_DEFINITIONS
from systemsettings.exceptions import ConfigParseError


class SystemSettingSerializer(serializers.ModelSerializer):
    updated_by = serializers.CharField(source="updated_by.email", read_only=True)
    data_type = serializers.ChoiceField(
        choices=SystemSetting.DATA_TYPE_CHOICES, required=False
    )
    category = serializers.ChoiceField(
        choices=SystemSetting.CATEGORY_CHOICES, required=False
    )

    class Meta:
        model = SystemSetting
        fields = [
            "key",
            "value",
            "description",
            "data_type",
            "category",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {"key": {"validators": []}}

    def validate(self, attrs):
        key = attrs.get("key")
        value = attrs.get("value")
        definition = SETTING_DEFINITIONS.get(key)

        if definition:
            # Schema metadata wins over whatever the client sent.
            attrs["data_type"] = definition["data_type"]
            attrs["category"] = definition["category"]
            attrs.setdefault("description", definition["description"])

        try:
            validate_setting_value(key, value, attrs.get("data_type"))
            # Thresholds and term bounds constrain each other across keys.
            overrides = dict(SystemSetting.objects.values_list("key", "value"))
            overrides[key] = value
            SettingsResolver(overrides).check_consistency()
        except ConfigParseError as e:
            raise serializers.ValidationError({"value": str(e.detail)})
        return attrs

    def create(self, validated_data):
        key = validated_data.pop("key")
        setting, _ = SystemSetting.objects.update_or_create(
            key=key, defaults=validated_data
        )
        return setting


class EffectiveSettingSerializer(serializers.Serializer):
    key = serializers.CharField()
    value = serializers.CharField(allow_null=True)
    default = serializers.CharField(allow_null=True)
    data_type = serializers.CharField()
    category = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    is_overridden = serializers.BooleanField()
