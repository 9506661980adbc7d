import logging
from rest_framework import generics, serializers, status
from rest_framework.response import Response

from systemsettings.exceptions import ConfigParseError
from systemsettings.models import SystemSetting
from systemsettings.resolver import SettingsResolver
from systemsettings.schema import SETTING_DEFINITIONS
from systemsettings.serializers import (
    SystemSettingSerializer,
    EffectiveSettingSerializer,
)
from accounts.permissions import IsSystemAdmin

logger = logging.getLogger(__name__)


class SystemSettingListCreateView(generics.ListCreateAPIView):
    """
    GET lists every known key with its effective value; POST upserts one override.
    """

    queryset = SystemSetting.objects.all()
    serializer_class = SystemSettingSerializer
    permission_classes = [IsSystemAdmin]

    def list(self, request, *args, **kwargs):
        rows = SettingsResolver.from_db().effective_settings()
        category = request.query_params.get("category")
        if category:
            rows = [row for row in rows if row["category"] == category]
        return Response(EffectiveSettingSerializer(rows, many=True).data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = serializer.save(updated_by=request.user)
        logger.info(
            f"Setting {setting.key} set to {setting.value!r} by {request.user.email}"
        )
        return Response(
            self.get_serializer(setting).data, status=status.HTTP_200_OK
        )


class SystemSettingDetailView(generics.RetrieveDestroyAPIView):
    queryset = SystemSetting.objects.all()
    serializer_class = SystemSettingSerializer
    permission_classes = [IsSystemAdmin]
    lookup_field = "key"

    def retrieve(self, request, key=None, *args, **kwargs):
        resolver = SettingsResolver.from_db()
        definition = SETTING_DEFINITIONS.get(key, {})
        return Response(
            {
                "key": key,
                "value": resolver.resolve(key, definition.get("default")),
                "is_overridden": resolver.is_overridden(key),
            }
        )

    def perform_destroy(self, instance):
        overrides = dict(SystemSetting.objects.values_list("key", "value"))
        overrides.pop(instance.key, None)
        try:
            SettingsResolver(overrides).check_consistency()
        except ConfigParseError as e:
            raise serializers.ValidationError({"value": str(e.detail)})
        logger.info(
            f"Setting {instance.key} reset to default by {self.request.user.email}"
        )
        instance.delete()
