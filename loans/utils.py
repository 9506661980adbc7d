import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.levels import update_user_xp
from loans.models import Loan
from loans.calculators import calculate_loan_terms, compute_credit_snapshot, parse_amount
from loans.exceptions import (
    LoanLimitExceeded,
    MembershipRequired,
    ActiveLoanLimitExceeded,
)
from notifications.utils import create_notification, send_notification_email
from systemsettings.resolver import SettingsResolver

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _to_cents(value):
    return Decimal(value).quantize(CENTS, ROUND_HALF_UP)


def check_loan_eligibility(user, amount, settings=None, loans=None):
    """
    Membership paid, amount within available credit and fewer approved loans
    than ``max_active_loans``. Returns the credit snapshot used for the checks.
    """
    settings = settings or SettingsResolver.from_db()
    amount = parse_amount(amount)

    if not user.membership_paid:
        raise MembershipRequired()

    if loans is None:
        loans = list(user.loans.filter(status="approved"))
    snapshot = compute_credit_snapshot(user, loans, settings)

    if amount > snapshot["available_credit"]:
        raise LoanLimitExceeded(snapshot["available_credit"])

    active_loans = len([loan for loan in loans if loan.status == "approved"])
    max_active_loans = settings.max_active_loans()
    if active_loans >= max_active_loans:
        raise ActiveLoanLimitExceeded(max_active_loans)

    return snapshot


def create_loan(user, amount, term_days=None, loan_purpose="", settings=None):
    settings = settings or SettingsResolver.from_db()
    loans = list(user.loans.filter(status="approved"))

    check_loan_eligibility(user, amount, settings, loans)
    terms = calculate_loan_terms(user, amount, term_days, settings, loans)

    # The stored total must agree with the stored, rounded rate.
    principal = _to_cents(parse_amount(amount))
    interest_rate = _to_cents(terms["interest_rate"])
    loan = Loan.objects.create(
        user=user,
        amount=principal,
        interest_rate=interest_rate,
        total_amount=_to_cents(principal * (1 + interest_rate / 100)),
        loan_term_days=terms["term_days"],
        loan_purpose=loan_purpose or "",
        status="pending",
    )
    logger.info(
        f"Loan {loan.reference} requested by {user.email}: {loan.amount} at {loan.interest_rate}% for {loan.loan_term_days} days"
    )
    return loan


def approve_loan(loan, admin, notes=None, settings=None):
    settings = settings or SettingsResolver.from_db()

    with transaction.atomic():
        loan = Loan.objects.select_for_update().select_related("user").get(pk=loan.pk)
        if loan.status != "pending":
            raise ValidationError(
                {"detail": f"Only pending loans can be approved; this loan is {loan.status}."}
            )

        check_loan_eligibility(loan.user, loan.amount, settings)

        loan.status = "approved"
        loan.approved_at = timezone.now()
        loan.approved_by = admin
        loan.admin_notes = notes or None
        loan.save(
            update_fields=["status", "approved_at", "approved_by", "admin_notes", "updated_at"]
        )

    logger.info(f"Loan {loan.reference} approved by {admin.email}")
    message = f"Your loan request of {loan.amount:,.2f} has been approved."
    create_notification(
        loan.user,
        type="loan_approved",
        title="Loan approved",
        message=message,
        data={"loan": loan.reference, "amount": str(loan.amount)},
    )
    send_notification_email(loan.user, "Loan approved", "Loan approved", message)
    return loan


def reject_loan(loan, admin, reason):
    if not reason or not str(reason).strip():
        raise ValidationError({"reason": "A rejection reason is required."})

    with transaction.atomic():
        loan = Loan.objects.select_for_update().select_related("user").get(pk=loan.pk)
        if loan.status != "pending":
            raise ValidationError(
                {"detail": f"Only pending loans can be rejected; this loan is {loan.status}."}
            )

        loan.status = "rejected"
        loan.rejected_at = timezone.now()
        loan.rejected_by = admin
        loan.rejection_reason = str(reason).strip()
        loan.save(
            update_fields=[
                "status",
                "rejected_at",
                "rejected_by",
                "rejection_reason",
                "updated_at",
            ]
        )

    logger.info(f"Loan {loan.reference} rejected by {admin.email}: {loan.rejection_reason}")
    message = (
        f"Your loan request of {loan.amount:,.2f} was rejected. Reason: {loan.rejection_reason}"
    )
    create_notification(
        loan.user,
        type="loan_rejected",
        title="Loan rejected",
        message=message,
        data={"loan": loan.reference, "reason": loan.rejection_reason},
    )
    send_notification_email(loan.user, "Loan rejected", "Loan rejected", message)
    return loan


def repay_loan(loan, paid_at=None, settings=None):
    """
    Close an approved loan, update the payment record and apply the repayment XP.
    """
    settings = settings or SettingsResolver.from_db()
    paid_at = paid_at or timezone.now()

    with transaction.atomic():
        loan = Loan.objects.select_for_update().select_related("user").get(pk=loan.pk)
        if loan.status != "approved":
            raise ValidationError({"detail": "Loan is not active."})

        on_time = loan.due_date is None or paid_at <= loan.due_date

        loan.status = "repaid"
        loan.paid_at = paid_at
        loan.save(update_fields=["status", "paid_at", "updated_at"])

        counters = {"total_payments": F("total_payments") + 1}
        if on_time:
            counters["on_time_payments"] = F("on_time_payments") + 1
        type(loan.user).objects.filter(pk=loan.user_id).update(**counters)

    user = loan.user
    xp_change = settings.repay_xp(on_time)
    if xp_change:
        update_user_xp(user, xp_change, settings)
    user.refresh_from_db()

    logger.info(
        f"Loan {loan.reference} repaid by {user.email} ({'on time' if on_time else 'late'})"
    )
    if on_time:
        title = "Loan Repaid On Time!"
        message = "Great job! Your on-time payment helps improve your level."
    else:
        title = "Loan Repaid"
        message = "Your loan has been repaid, but it was late."
    create_notification(
        user,
        type="loan_repaid",
        title=title,
        message=message,
        data={"loan": loan.reference, "on_time": on_time, "xp_change": xp_change},
    )
    return loan
