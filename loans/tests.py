from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from loans.calculators import calculate_loan_terms, compute_credit_snapshot
from loans.exceptions import (
    LoanLimitExceeded,
    MembershipRequired,
    ActiveLoanLimitExceeded,
)
from loans.models import Loan
from loans.utils import create_loan, approve_loan, reject_loan, repay_loan
from notifications.models import Notification
from systemsettings.exceptions import ConfigParseError
from systemsettings.models import SystemSetting
from systemsettings.resolver import SettingsResolver

User = get_user_model()


def make_user(email="borrower@example.com", **extra):
    extra.setdefault("membership_paid", True)
    return User.objects.create_user(email=email, password="password", **extra)


class LoanTermsCalculatorTests(TestCase):
    def setUp(self):
        self.user = make_user(xp=450, level=1)
        self.defaults = SettingsResolver({})

    def test_level_one_request_with_defaults(self):
        terms = calculate_loan_terms(self.user, Decimal("5000"), 30, self.defaults, loans=[])

        self.assertEqual(terms["interest_rate"], Decimal("5"))
        self.assertEqual(terms["total_amount"], Decimal("5250"))
        self.assertEqual(terms["max_amount"], Decimal("10000"))
        self.assertEqual(terms["term_days"], 30)

    def test_total_is_amount_plus_interest(self):
        self.user.level = 3
        terms = calculate_loan_terms(self.user, "1234.56", 30, self.defaults, loans=[])

        self.assertEqual(terms["interest_rate"], Decimal("2"))
        self.assertEqual(
            terms["total_amount"], Decimal("1234.56") * (1 + Decimal("2") / 100)
        )

    def test_interest_rate_override_for_level(self):
        self.user.level = 2
        settings = SettingsResolver({"interest_rate_level_2": "1.5"})

        terms = calculate_loan_terms(self.user, "1000", 30, settings, loans=[])

        self.assertEqual(terms["interest_rate"], Decimal("1.5"))
        self.assertEqual(terms["total_amount"], Decimal("1015"))

    def test_term_is_clamped_into_bounds(self):
        short = calculate_loan_terms(self.user, "100", 3, self.defaults, loans=[])
        long = calculate_loan_terms(self.user, "100", 365, self.defaults, loans=[])

        self.assertEqual(short["term_days"], 7)
        self.assertEqual(long["term_days"], 90)

    def test_term_bounds_follow_overrides(self):
        settings = SettingsResolver({"min_loan_term_days": "14", "max_loan_term_days": "60"})

        terms = calculate_loan_terms(self.user, "100", 7, settings, loans=[])

        self.assertEqual(terms["term_days"], 14)

    def test_amount_over_ceiling_is_refused(self):
        with self.assertRaises(LoanLimitExceeded) as ctx:
            calculate_loan_terms(self.user, "20000", 30, self.defaults, loans=[])

        self.assertIn("10,000.00", str(ctx.exception.detail))
        self.assertFalse(Loan.objects.exists())

    def test_level_ceiling_override(self):
        settings = SettingsResolver({"max_loan_level_1": "2000"})

        terms = calculate_loan_terms(self.user, "1500", 30, settings, loans=[])
        self.assertEqual(terms["max_amount"], Decimal("2000"))

        with self.assertRaises(LoanLimitExceeded):
            calculate_loan_terms(self.user, "2500", 30, settings, loans=[])

    def test_non_positive_amount_is_refused(self):
        for amount in ("0", "-5", "abc"):
            with self.assertRaises(ValidationError):
                calculate_loan_terms(self.user, amount, 30, self.defaults, loans=[])

    def test_same_inputs_give_same_terms(self):
        first = calculate_loan_terms(self.user, "750", 45, self.defaults, loans=[])
        second = calculate_loan_terms(self.user, "750", 45, self.defaults, loans=[])

        self.assertEqual(first, second)

    def test_malformed_override_is_reported(self):
        settings = SettingsResolver({"interest_rate_level_1": "five"})

        with self.assertRaises(ConfigParseError) as ctx:
            calculate_loan_terms(self.user, "100", 30, settings, loans=[])

        self.assertIn("interest_rate_level_1", str(ctx.exception.detail))


class CreditSnapshotTests(TestCase):
    def setUp(self):
        self.user = make_user(level=2)
        self.defaults = SettingsResolver({})

    def test_available_credit_subtracts_approved_debt(self):
        loans = [
            Loan(user=self.user, amount=5000, total_amount=Decimal("5250.00"), status="approved"),
            Loan(user=self.user, amount=1000, total_amount=Decimal("1050.00"), status="pending"),
            Loan(user=self.user, amount=1000, total_amount=Decimal("1050.00"), status="repaid"),
        ]

        snapshot = compute_credit_snapshot(self.user, loans, self.defaults)

        self.assertEqual(snapshot["max_credit"], Decimal("20000"))
        self.assertEqual(snapshot["outstanding_debt"], Decimal("5250.00"))
        self.assertEqual(snapshot["available_credit"], Decimal("14750.00"))
        self.assertEqual(snapshot["interest_rate"], Decimal("3"))

    def test_available_credit_never_negative(self):
        loans = [
            Loan(user=self.user, amount=20000, total_amount=Decimal("25000.00"), status="approved"),
        ]

        snapshot = compute_credit_snapshot(self.user, loans, self.defaults)

        self.assertEqual(snapshot["available_credit"], Decimal("0"))

    def test_reads_approved_loans_from_database(self):
        Loan.objects.create(
            user=self.user,
            amount=Decimal("1000.00"),
            interest_rate=Decimal("3.00"),
            total_amount=Decimal("1030.00"),
            status="approved",
        )

        snapshot = compute_credit_snapshot(self.user, settings=self.defaults)

        self.assertEqual(snapshot["outstanding_debt"], Decimal("1030.00"))
        self.assertEqual(snapshot["available_credit"], Decimal("18970.00"))

    def test_base_credit_limit_override(self):
        settings = SettingsResolver({"base_credit_limit": "2500"})

        snapshot = compute_credit_snapshot(self.user, [], settings)

        self.assertEqual(snapshot["max_credit"], Decimal("5000"))


@override_settings(RESEND_API_KEY="")
class LoanLifecycleTests(TestCase):
    def setUp(self):
        self.user = make_user(xp=450, level=1)
        self.admin = User.objects.create_superuser(email="admin@example.com", password="password")

    def approved_loan(self, amount="100.00"):
        return Loan.objects.create(
            user=self.user,
            amount=Decimal(amount),
            interest_rate=Decimal("5.00"),
            total_amount=Decimal(amount) * Decimal("1.05"),
            status="approved",
        )

    def test_create_loan_persists_pending_terms(self):
        loan = create_loan(self.user, Decimal("5000"), 30, "School fees")

        self.assertEqual(loan.status, "pending")
        self.assertEqual(loan.amount, Decimal("5000.00"))
        self.assertEqual(loan.interest_rate, Decimal("5.00"))
        self.assertEqual(loan.total_amount, Decimal("5250.00"))
        self.assertEqual(loan.loan_term_days, 30)
        self.assertAlmostEqual(
            loan.due_date, loan.created_at + timedelta(days=30), delta=timedelta(seconds=5)
        )
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="loan_requested").exists()
        )

    def test_create_loan_uses_stored_overrides(self):
        SystemSetting.objects.create(key="interest_rate_level_1", value="4.25")

        loan = create_loan(self.user, Decimal("1000"), 30)

        self.assertEqual(loan.interest_rate, Decimal("4.25"))
        self.assertEqual(loan.total_amount, Decimal("1042.50"))

    def test_total_uses_rounded_rate(self):
        SystemSetting.objects.create(key="interest_rate_level_1", value="1.555")

        loan = create_loan(self.user, Decimal("1000"), 30)

        self.assertEqual(loan.interest_rate, Decimal("1.56"))
        self.assertEqual(loan.total_amount, Decimal("1015.60"))
        self.assertEqual(
            loan.total_amount, loan.amount * (1 + loan.interest_rate / 100)
        )

    def test_out_of_range_rate_is_rejected(self):
        SystemSetting.objects.create(key="interest_rate_level_1", value="1000")

        with self.assertRaises(ConfigParseError):
            create_loan(self.user, Decimal("1000"), 30)

        self.assertFalse(Loan.objects.exists())

    def test_membership_is_required(self):
        self.user.membership_paid = False
        self.user.save()

        with self.assertRaises(MembershipRequired):
            create_loan(self.user, Decimal("100"), 30)
        self.assertFalse(Loan.objects.exists())

    def test_amount_over_available_credit_is_refused(self):
        self.approved_loan("9000.00")

        with self.assertRaises(LoanLimitExceeded):
            create_loan(self.user, Decimal("2000"), 30)
        self.assertEqual(Loan.objects.filter(status="pending").count(), 0)

    def test_active_loan_limit(self):
        for _ in range(3):
            self.approved_loan()

        with self.assertRaises(ActiveLoanLimitExceeded):
            create_loan(self.user, Decimal("100"), 30)

    def test_approve_pending_loan(self):
        loan = create_loan(self.user, Decimal("1000"), 30)

        loan = approve_loan(loan, self.admin, "Looks good")

        self.assertEqual(loan.status, "approved")
        self.assertEqual(loan.approved_by, self.admin)
        self.assertIsNotNone(loan.approved_at)
        self.assertEqual(loan.admin_notes, "Looks good")
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="loan_approved").exists()
        )

    def test_only_pending_loans_can_be_approved(self):
        loan = self.approved_loan()

        with self.assertRaises(ValidationError):
            approve_loan(loan, self.admin)

    def test_reject_requires_reason(self):
        loan = create_loan(self.user, Decimal("1000"), 30)

        with self.assertRaises(ValidationError):
            reject_loan(loan, self.admin, "  ")

        loan = reject_loan(loan, self.admin, "Insufficient history")
        self.assertEqual(loan.status, "rejected")
        self.assertEqual(loan.rejection_reason, "Insufficient history")
        self.assertEqual(loan.rejected_by, self.admin)
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="loan_rejected").exists()
        )

    def test_on_time_repayment_awards_xp(self):
        loan = approve_loan(create_loan(self.user, Decimal("1000"), 30), self.admin)

        loan = repay_loan(loan)

        self.user.refresh_from_db()
        self.assertEqual(loan.status, "repaid")
        self.assertIsNotNone(loan.paid_at)
        self.assertEqual(self.user.on_time_payments, 1)
        self.assertEqual(self.user.total_payments, 1)
        self.assertEqual(self.user.xp, 500)
        self.assertEqual(self.user.level, 2)
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="level_up").exists()
        )
        notification = Notification.objects.get(user=self.user, type="loan_repaid")
        self.assertTrue(notification.data["on_time"])

    def test_late_repayment_costs_xp(self):
        loan = approve_loan(create_loan(self.user, Decimal("1000"), 30), self.admin)

        repay_loan(loan, paid_at=loan.due_date + timedelta(days=1))

        self.user.refresh_from_db()
        self.assertEqual(self.user.on_time_payments, 0)
        self.assertEqual(self.user.total_payments, 1)
        self.assertEqual(self.user.xp, 350)
        self.assertEqual(self.user.level, 1)
        notification = Notification.objects.get(user=self.user, type="loan_repaid")
        self.assertFalse(notification.data["on_time"])

    def test_only_approved_loans_can_be_repaid(self):
        loan = create_loan(self.user, Decimal("1000"), 30)

        with self.assertRaises(ValidationError):
            repay_loan(loan)

        loan.refresh_from_db()
        self.assertEqual(loan.status, "pending")


@override_settings(RESEND_API_KEY="")
class LoanAPITests(APITestCase):
    def setUp(self):
        self.user = make_user(xp=450, level=1)
        self.admin = User.objects.create_superuser(email="admin@example.com", password="password")

    def test_calculate_preview(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(
            "/api/v1/loans/calculate/", {"amount": "5000", "term_days": 30}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["interest_rate"], "5.00")
        self.assertEqual(response.data["total_amount"], "5250.00")
        self.assertEqual(response.data["max_amount"], "10000.00")
        self.assertEqual(response.data["term_days"], 30)
        self.assertFalse(Loan.objects.exists())

    def test_request_and_list_loans(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(
            "/api/v1/loans/",
            {"amount": "5000", "term_days": 30, "loan_purpose": "Stock"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["total_amount"], "5250.00")

        response = self.client.get("/api/v1/loans/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_request_over_limit_returns_code(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post("/api/v1/loans/", {"amount": "20000"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "loan_limit_exceeded")
        self.assertFalse(Loan.objects.exists())

    def test_admin_list_requires_admin(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/v1/loans/admin/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_approves_and_member_repays(self):
        loan = create_loan(self.user, Decimal("1000"), 30)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/loans/admin/", {"status": "pending"})
        self.assertEqual(len(response.data), 1)

        response = self.client.post(
            f"/api/v1/loans/admin/{loan.reference}/approve/",
            {"admin_notes": "ok"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "approved")

        self.client.force_authenticate(user=self.user)
        response = self.client.patch(f"/api/v1/loans/{loan.reference}/repay/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "repaid")

    def test_reject_without_reason(self):
        loan = create_loan(self.user, Decimal("1000"), 30)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            f"/api/v1/loans/admin/{loan.reference}/reject/", {}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        loan.refresh_from_db()
        self.assertEqual(loan.status, "pending")
