from django.contrib import admin

from notifications.models import Notification


class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "title", "read", "created_at")
    search_fields = ("user__email", "title")
    list_filter = ("type", "read", "created_at")
    ordering = ("-created_at",)


admin.site.register(Notification, NotificationAdmin)
