from django.contrib import admin

from accounts.models import User


class UserAdmin(admin.ModelAdmin):
    list_display = (
        "email",
        "username",
        "xp",
        "level",
        "membership_paid",
        "is_banned",
        "is_system_admin",
    )
    search_fields = ("email", "username", "first_name", "last_name")
    list_filter = ("level", "membership_paid", "is_banned", "is_system_admin")
    ordering = ("-created_at",)
    readonly_fields = ("password", "reference", "last_login", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("email", "password", "reference")}),
        (
            "Profile",
            {
                "fields": (
                    "username",
                    "first_name",
                    "last_name",
                    "profile_image_url",
                    "phone_number",
                    "account_number",
                )
            },
        ),
        ("Experience", {"fields": ("xp", "level")}),
        (
            "Lending",
            {"fields": ("membership_paid", "on_time_payments", "total_payments")},
        ),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_banned",
                    "is_staff",
                    "is_superuser",
                    "is_system_admin",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Dates", {"fields": ("last_login", "created_at", "updated_at")}),
    )


admin.site.register(User, UserAdmin)
