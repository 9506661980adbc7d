from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.levels import level_for_xp, update_user_level, update_user_xp
from loans.models import Loan
from notifications.models import Notification
from systemsettings.exceptions import ConfigParseError
from systemsettings.resolver import SettingsResolver

User = get_user_model()


class LevelTests(TestCase):
    def setUp(self):
        self.defaults = SettingsResolver({})
        self.user = User.objects.create_user(email="player@example.com", password="password")

    def test_new_user_defaults(self):
        self.assertEqual(self.user.xp, 100)
        self.assertEqual(self.user.level, 1)

    def test_level_boundaries(self):
        cases = [
            (-50, 1),
            (0, 1),
            (499, 1),
            (500, 2),
            (1499, 2),
            (1500, 3),
            (2999, 3),
            (3000, 4),
            (100000, 4),
        ]
        for xp, level in cases:
            with self.subTest(xp=xp):
                self.assertEqual(level_for_xp(xp, self.defaults), level)

    def test_thresholds_follow_overrides(self):
        settings = SettingsResolver({"level_2_required_xp": "200"})

        self.assertEqual(level_for_xp(250, settings), 2)

    def test_decreasing_thresholds_are_rejected(self):
        settings = SettingsResolver({"level_3_required_xp": "100"})

        with self.assertRaises(ConfigParseError):
            level_for_xp(250, settings)

    def test_level_up_is_announced_once(self):
        self.user.xp = 1600
        self.user.save()

        update_user_level(self.user, self.defaults)
        update_user_level(self.user, self.defaults)

        self.user.refresh_from_db()
        self.assertEqual(self.user.level, 3)
        notifications = Notification.objects.filter(user=self.user, type="level_up")
        self.assertEqual(notifications.count(), 1)
        self.assertEqual(notifications.get().data, {"old_level": 1, "new_level": 3})

    def test_losing_xp_does_not_demote(self):
        update_user_xp(self.user, 500, self.defaults)
        update_user_xp(self.user, -300, self.defaults)

        self.user.refresh_from_db()
        self.assertEqual(self.user.xp, 300)
        self.assertEqual(self.user.level, 2)

    def test_xp_change_is_applied_to_stored_value(self):
        stale = User.objects.get(pk=self.user.pk)
        update_user_xp(self.user, 20, self.defaults)

        update_user_xp(stale, 30, self.defaults)

        self.assertEqual(stale.xp, 150)


class AuthAPITests(APITestCase):
    def test_signup_and_token(self):
        response = self.client.post(
            "/api/v1/auth/signup/",
            {"email": "new@example.com", "password": "secret123", "username": "newbie"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["xp"], 100)
        self.assertNotIn("password", response.data)

        response = self.client.post(
            "/api/v1/auth/token/",
            {"email": "new@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("token", response.data)

    def test_bad_credentials(self):
        User.objects.create_user(email="user@example.com", password="secret123")

        response = self.client.post(
            "/api/v1/auth/token/",
            {"email": "user@example.com", "password": "wrong"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_includes_credit_snapshot(self):
        user = User.objects.create_user(email="me@example.com", password="secret123", level=2)
        Loan.objects.create(
            user=user,
            amount=Decimal("1000.00"),
            interest_rate=Decimal("3.00"),
            total_amount=Decimal("1030.00"),
            status="approved",
        )
        self.client.force_authenticate(user=user)

        response = self.client.get("/api/v1/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["credit"]["max_credit"], "20000.00")
        self.assertEqual(response.data["credit"]["outstanding_debt"], "1030.00")
        self.assertEqual(response.data["credit"]["available_credit"], "18970.00")
        self.assertEqual(response.data["credit"]["interest_rate"], "3.00")

    def test_me_cannot_change_xp(self):
        user = User.objects.create_user(email="me@example.com", password="secret123")
        self.client.force_authenticate(user=user)

        response = self.client.patch(
            "/api/v1/auth/me/", {"xp": 9999, "username": "renamed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.xp, 100)
        self.assertEqual(user.username, "renamed")


class AdminAPITests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(email="admin@example.com", password="password")
        self.user = User.objects.create_user(email="user@example.com", password="password")

    def test_admin_adjusts_xp(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/auth/users/{self.user.id}/xp/", {"xp_change": 450}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.xp, 550)
        self.assertEqual(self.user.level, 2)
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="admin_xp_change").exists()
        )

    def test_admin_bans_and_marks_membership(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(
            f"/api/v1/auth/users/{self.user.id}/ban/", {"is_banned": True}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(
            f"/api/v1/auth/users/{self.user.id}/membership/",
            {"membership_paid": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.user.refresh_from_db()
        self.assertTrue(self.user.is_banned)
        self.assertTrue(self.user.membership_paid)

    def test_stats(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/auth/stats/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_users"], 2)
        self.assertEqual(response.data["total_loans"], 0)

    def test_members_cannot_use_admin_endpoints(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.patch(
            f"/api/v1/auth/users/{self.user.id}/xp/", {"xp_change": 1000}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.user.refresh_from_db()
        self.assertEqual(self.user.xp, 100)
