# calculators.py
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Optional

from rest_framework.exceptions import ValidationError

from loans.exceptions import LoanLimitExceeded
from systemsettings.resolver import SettingsResolver
from systemsettings.schema import DEFAULT_TERM_DAYS

ZERO = Decimal("0")
HUNDRED = Decimal("100")


# ----------------------------------------------------------------------
# Credit / debt snapshot
# ----------------------------------------------------------------------
def compute_credit_snapshot(
    user,
    loans: Optional[Iterable] = None,
    settings: Optional[SettingsResolver] = None,
) -> Dict:
    """
    Borrowing capacity derived from the user's level and approved loans.

    Recomputed on every call; nothing here is persisted.
    """
    settings = settings or SettingsResolver.from_db()
    if loans is None:
        loans = user.loans.filter(status="approved")

    outstanding_debt = sum(
        (Decimal(str(loan.total_amount)) for loan in loans if loan.status == "approved"),
        ZERO,
    )
    max_credit = settings.base_credit_limit() * user.level
    available_credit = max(ZERO, max_credit - outstanding_debt)

    return {
        "available_credit": available_credit,
        "outstanding_debt": outstanding_debt,
        "max_credit": max_credit,
        "interest_rate": settings.interest_rate_for_level(user.level),
    }


# ----------------------------------------------------------------------
# Request parsing
# ----------------------------------------------------------------------
def parse_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError({"amount": "Amount must be a number."})
    if not value.is_finite() or value <= 0:
        raise ValidationError({"amount": "Amount must be greater than 0."})
    return value


def parse_term_days(term_days) -> int:
    if term_days is None or term_days == "":
        return DEFAULT_TERM_DAYS
    try:
        return int(term_days)
    except (TypeError, ValueError):
        raise ValidationError({"term_days": "Term must be a whole number of days."})


# ----------------------------------------------------------------------
# Loan terms
# ----------------------------------------------------------------------
def calculate_loan_terms(
    user,
    amount,
    term_days=DEFAULT_TERM_DAYS,
    settings: Optional[SettingsResolver] = None,
    loans: Optional[Iterable] = None,
) -> Dict:
    """
    Interest rate, repayment total, ceiling and clamped term for a request.

    Reads the user's stored level, the given loans (approved ones count as debt)
    and the settings snapshot; writes nothing.
    """
    settings = settings or SettingsResolver.from_db()
    amount = parse_amount(amount)
    term_days = parse_term_days(term_days)

    snapshot = compute_credit_snapshot(user, loans, settings)
    max_amount = settings.max_loan_for_level(user.level, snapshot["available_credit"])
    interest_rate = settings.interest_rate_for_level(user.level)
    min_term_days, max_term_days = settings.term_bounds()

    term_days = min(max(term_days, min_term_days), max_term_days)

    if amount > max_amount:
        raise LoanLimitExceeded(max_amount)

    total_amount = amount * (1 + interest_rate / HUNDRED)

    return {
        "interest_rate": interest_rate,
        "total_amount": total_amount,
        "max_amount": max_amount,
        "term_days": term_days,
    }
