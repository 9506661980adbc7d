from rest_framework import status
from rest_framework.exceptions import APIException


class LoanLimitExceeded(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Requested amount exceeds the maximum loan amount."
    default_code = "loan_limit_exceeded"

    def __init__(self, max_amount):
        self.max_amount = max_amount
        super().__init__(
            f"Requested amount exceeds the maximum loan amount of {max_amount:,.2f}."
        )


class MembershipRequired(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Membership must be paid before requesting a loan."
    default_code = "membership_required"


class ActiveLoanLimitExceeded(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Active loan limit reached."
    default_code = "active_loan_limit_exceeded"

    def __init__(self, max_active_loans):
        self.max_active_loans = max_active_loans
        super().__init__(
            f"You already have {max_active_loans} unpaid loans; repay one before requesting another."
        )
