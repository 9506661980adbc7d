from rest_framework import serializers

from loans.models import Loan
from systemsettings.schema import DEFAULT_TERM_DAYS


class LoanSerializer(serializers.ModelSerializer):
    user = serializers.CharField(source="user.email", read_only=True)
    approved_by = serializers.CharField(
        source="approved_by.email", read_only=True, default=None
    )
    rejected_by = serializers.CharField(
        source="rejected_by.email", read_only=True, default=None
    )

    class Meta:
        model = Loan
        fields = [
            "reference",
            "user",
            "amount",
            "interest_rate",
            "total_amount",
            "status",
            "loan_purpose",
            "loan_term_days",
            "due_date",
            "paid_at",
            "approved_at",
            "approved_by",
            "rejected_at",
            "rejected_by",
            "rejection_reason",
            "admin_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class LoanRequestSerializer(serializers.Serializer):
    # Positivity is checked by the calculator so the preview and the request agree.
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    term_days = serializers.IntegerField(required=False, default=DEFAULT_TERM_DAYS)
    loan_purpose = serializers.CharField(required=False, allow_blank=True, default="")


class LoanTermsSerializer(serializers.Serializer):
    interest_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    max_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    term_days = serializers.IntegerField()


class CreditSnapshotSerializer(serializers.Serializer):
    available_credit = serializers.DecimalField(max_digits=14, decimal_places=2)
    outstanding_debt = serializers.DecimalField(max_digits=14, decimal_places=2)
    max_credit = serializers.DecimalField(max_digits=14, decimal_places=2)
    interest_rate = serializers.DecimalField(max_digits=5, decimal_places=2)


class LoanApprovalSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")


class LoanRejectionSerializer(serializers.Serializer):
    reason = serializers.CharField()
