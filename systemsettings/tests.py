from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from systemsettings.exceptions import ConfigParseError
from systemsettings.models import SystemSetting
from systemsettings.resolver import SettingsResolver, resolve_setting

User = get_user_model()


class SettingsResolverTests(TestCase):
    def test_default_used_without_override(self):
        self.assertEqual(resolve_setting("interest_rate_level_1", "5"), "5")

    def test_stored_override_wins(self):
        SystemSetting.objects.create(key="interest_rate_level_1", value="4.5")

        self.assertEqual(resolve_setting("interest_rate_level_1", "5"), "4.5")
        self.assertEqual(
            SettingsResolver.from_db().interest_rate_for_level(1), Decimal("4.5")
        )

    def test_defaults(self):
        settings = SettingsResolver({})

        self.assertEqual(
            settings.level_thresholds(), [(0, 1), (500, 2), (1500, 3), (3000, 4)]
        )
        self.assertEqual(settings.interest_rate_for_level(4), Decimal("1"))
        self.assertEqual(settings.term_bounds(), (7, 90))
        self.assertEqual(settings.max_active_loans(), 3)
        self.assertEqual(settings.base_credit_limit(), Decimal("10000"))
        self.assertEqual(settings.repay_xp(True), 50)
        self.assertEqual(settings.repay_xp(False), -100)
        self.assertFalse(settings.reverse_reaction_xp())

    def test_max_loan_falls_back(self):
        settings = SettingsResolver({})

        self.assertEqual(settings.max_loan_for_level(2, Decimal("123")), Decimal("123"))

    def test_malformed_values_raise(self):
        cases = [
            ({"interest_rate_level_1": "abc"}, lambda s: s.interest_rate_for_level(1)),
            ({"interest_rate_level_1": "NaN"}, lambda s: s.interest_rate_for_level(1)),
            ({"max_active_loans": "2.5"}, lambda s: s.max_active_loans()),
            ({"max_active_loans": "1_000"}, lambda s: s.max_active_loans()),
            ({"base_credit_limit": "1_000"}, lambda s: s.base_credit_limit()),
            ({"base_credit_limit": "1e3"}, lambda s: s.base_credit_limit()),
            ({"interest_rate_level_1": "Infinity"}, lambda s: s.interest_rate_for_level(1)),
            ({"interest_rate_level_1": "1000"}, lambda s: s.interest_rate_for_level(1)),
            ({"interest_rate_level_1": "-1"}, lambda s: s.interest_rate_for_level(1)),
            ({"reverse_reaction_xp": "maybe"}, lambda s: s.reverse_reaction_xp()),
            ({"min_loan_term_days": "0"}, lambda s: s.term_bounds()),
            (
                {"min_loan_term_days": "30", "max_loan_term_days": "10"},
                lambda s: s.term_bounds(),
            ),
        ]
        for overrides, read in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ConfigParseError):
                    read(SettingsResolver(overrides))

    def test_error_names_key(self):
        settings = SettingsResolver({"base_credit_limit": "lots"})

        with self.assertRaises(ConfigParseError) as ctx:
            settings.base_credit_limit()

        self.assertIn("base_credit_limit", str(ctx.exception.detail))
        self.assertEqual(ctx.exception.status_code, 500)


class LoadDefaultSettingsCommandTests(TestCase):
    def test_creates_defaults_once(self):
        out = StringIO()
        call_command("load_default_settings", stdout=out)
        count = SystemSetting.objects.count()
        call_command("load_default_settings", stdout=out)

        self.assertEqual(SystemSetting.objects.count(), count)
        self.assertEqual(SystemSetting.objects.get(key="level_2_required_xp").value, "500")
        self.assertFalse(SystemSetting.objects.filter(key="max_loan_level_1").exists())


class SystemSettingAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(email="admin@example.com", password="password")
        self.user = User.objects.create_user(email="user@example.com", password="password")

    def test_only_admins(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/v1/settings/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_shows_effective_values(self):
        SystemSetting.objects.create(key="interest_rate_level_2", value="1.5")
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/settings/", {"category": "lending"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = {row["key"]: row for row in response.data}
        self.assertEqual(rows["interest_rate_level_2"]["value"], "1.5")
        self.assertTrue(rows["interest_rate_level_2"]["is_overridden"])
        self.assertEqual(rows["interest_rate_level_1"]["value"], "5")
        self.assertNotIn("level_2_required_xp", rows)

    def test_upsert_and_reset(self):
        self.client.force_authenticate(user=self.admin)

        for value in ("2.5", "2.25"):
            response = self.client.post(
                "/api/v1/settings/",
                {"key": "interest_rate_level_3", "value": value},
                format="json",
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        setting = SystemSetting.objects.get(key="interest_rate_level_3")
        self.assertEqual(setting.value, "2.25")
        self.assertEqual(setting.category, "lending")
        self.assertEqual(setting.updated_by, self.admin)

        response = self.client.delete("/api/v1/settings/interest_rate_level_3/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.get("/api/v1/settings/interest_rate_level_3/")
        self.assertEqual(response.data["value"], "2")
        self.assertFalse(response.data["is_overridden"])

    def test_invalid_value_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/settings/",
            {"key": "max_active_loans", "value": "three"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("value", response.data)
        self.assertFalse(SystemSetting.objects.exists())

    def test_interest_rate_limits_rejected(self):
        self.client.force_authenticate(user=self.admin)

        for value in ("1.555", "1000", "-0.5"):
            with self.subTest(value=value):
                response = self.client.post(
                    "/api/v1/settings/",
                    {"key": "interest_rate_level_1", "value": value},
                    format="json",
                )
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertFalse(SystemSetting.objects.exists())

    def test_trailing_zeros_accepted(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/settings/",
            {"key": "interest_rate_level_1", "value": "1.500"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_out_of_order_threshold_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/settings/",
            {"key": "level_2_required_xp", "value": "5000"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("level_2_required_xp", str(response.data["value"]))
        self.assertFalse(SystemSetting.objects.exists())
        SettingsResolver.from_db().level_thresholds()

    def test_cross_key_rules_rejected(self):
        self.client.force_authenticate(user=self.admin)
        cases = [
            ("level_1_required_xp", "10"),
            ("max_loan_term_days", "5"),
            ("min_loan_term_days", "0"),
            ("min_loan_term_days", "120"),
        ]

        for key, value in cases:
            with self.subTest(key=key, value=value):
                response = self.client.post(
                    "/api/v1/settings/", {"key": key, "value": value}, format="json"
                )
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertFalse(SystemSetting.objects.exists())

    def test_consistent_threshold_change_accepted(self):
        self.client.force_authenticate(user=self.admin)

        for key, value in (("level_4_required_xp", "6000"), ("level_3_required_xp", "5000")):
            response = self.client.post(
                "/api/v1/settings/", {"key": key, "value": value}, format="json"
            )
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(
            "/api/v1/settings/",
            {"key": "level_2_required_xp", "value": "5000"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            SettingsResolver.from_db().level_thresholds(),
            [(0, 1), (5000, 2), (5000, 3), (6000, 4)],
        )

    def test_reset_that_breaks_ordering_rejected(self):
        SystemSetting.objects.create(key="level_2_required_xp", value="2000")
        SystemSetting.objects.create(key="level_3_required_xp", value="2500")
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete("/api/v1/settings/level_3_required_xp/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(SystemSetting.objects.filter(key="level_3_required_xp").exists())
