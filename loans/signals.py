import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from loans.models import Loan
from notifications.utils import create_notification

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Loan)
def notify_loan_requested(sender, instance, created, **kwargs):
    """
    Let the borrower know the request is waiting for an admin decision.
    """
    if not created:
        return

    create_notification(
        instance.user,
        type="loan_requested",
        title="Loan requested",
        message=f"Your loan request of {instance.amount:,.2f} is pending approval.",
        data={"loan": instance.reference, "amount": str(instance.amount)},
    )
    logger.info(f"Loan {instance.reference} awaiting approval")
