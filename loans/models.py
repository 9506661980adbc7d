from dateutil.relativedelta import relativedelta
from django.db import models
from django.utils import timezone
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel, UniversalIdModel, ReferenceModel

User = get_user_model()


class Loan(TimeStampedModel, UniversalIdModel, ReferenceModel):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
        ("repaid", "Repaid"),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="loans")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    # Snapshot of the terms at request time; never recomputed.
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    loan_purpose = models.TextField(blank=True, null=True)
    loan_term_days = models.PositiveIntegerField(default=30)
    due_date = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_loans",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rejected_loans",
    )
    rejection_reason = models.TextField(blank=True, null=True)
    admin_notes = models.TextField(blank=True, null=True)

    class Meta:
        verbose_name = "Loan"
        verbose_name_plural = "Loans"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "status"], name="loans_user_status_idx"),
        ]

    def __str__(self):
        return f"{self.reference} - {self.user.email} - {self.amount} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.due_date and self.loan_term_days:
            self.due_date = timezone.now() + relativedelta(days=self.loan_term_days)
        super().save(*args, **kwargs)
