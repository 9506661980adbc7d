from django.apps import AppConfig


class SystemsettingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "systemsettings"
