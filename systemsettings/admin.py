from django.contrib import admin

from systemsettings.models import SystemSetting


class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "data_type", "category", "updated_by", "updated_at")
    search_fields = ("key", "description")
    list_filter = ("category", "data_type")
    ordering = ("category", "key")


admin.site.register(SystemSetting, SystemSettingAdmin)
