from django.core.management.base import BaseCommand

from systemsettings.models import SystemSetting
from systemsettings.schema import SETTING_DEFINITIONS


class Command(BaseCommand):
    help = "Write the built-in defaults into the system settings table"

    def handle(self, *args, **options):
        for key, definition in SETTING_DEFINITIONS.items():
            if definition["default"] is None:
                # Runtime fallback; storing a value would change behaviour.
                self.stdout.write(f"Skipping {key} (no static default).")
                continue

            setting, created = SystemSetting.objects.get_or_create(
                key=key,
                defaults={
                    "value": definition["default"],
                    "data_type": definition["data_type"],
                    "category": definition["category"],
                    "description": definition["description"],
                },
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f"Created setting: {key} = {setting.value}"))
            elif setting.value != definition["default"]:
                self.stdout.write(
                    self.style.WARNING(f"Setting {key} already overridden with {setting.value}.")
                )
            else:
                self.stdout.write(f"Setting {key} already exists.")

        self.stdout.write(self.style.SUCCESS("Settings setup complete."))
