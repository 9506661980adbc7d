from django.db import models
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel

User = get_user_model()


class Notification(TimeStampedModel):
    TYPE_CHOICES = [
        ("xp_change", "XP Change"),
        ("level_up", "Level Up"),
        ("post_created", "Post Created"),
        ("post_like", "Post Like"),
        ("post_dislike", "Post Dislike"),
        ("loan_requested", "Loan Requested"),
        ("loan_approved", "Loan Approved"),
        ("loan_rejected", "Loan Rejected"),
        ("loan_repaid", "Loan Repaid"),
        ("admin_xp_change", "Admin XP Change"),
    ]

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notifications"
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["user", "created_at"], name="notifications_user_created_idx"
            ),
        ]

    def __str__(self):
        return f"{self.type} for {self.user.email}: {self.title}"
