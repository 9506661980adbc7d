from django.db import models
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel, UniversalIdModel

User = get_user_model()


class SystemSetting(TimeStampedModel, UniversalIdModel):
    DATA_TYPE_CHOICES = [
        ("string", "String"),
        ("number", "Number"),
        ("integer", "Integer"),
        ("boolean", "Boolean"),
    ]

    CATEGORY_CHOICES = [
        ("general", "General"),
        ("lending", "Lending"),
        ("xp", "XP"),
        ("levels", "Levels"),
    ]

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True, null=True)
    data_type = models.CharField(
        max_length=20, choices=DATA_TYPE_CHOICES, default="string"
    )
    category = models.CharField(
        max_length=50, choices=CATEGORY_CHOICES, default="general"
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="settings_updates",
    )

    class Meta:
        verbose_name = "System Setting"
        verbose_name_plural = "System Settings"
        ordering = ["category", "key"]

    def __str__(self):
        return f"{self.key} = {self.value}"
