from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from notifications.models import Notification
from notifications.utils import create_notification, send_notification_email

User = get_user_model()


class SendNotificationEmailTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="user@example.com", password="password")

    @override_settings(RESEND_API_KEY="")
    def test_skipped_without_api_key(self):
        with mock.patch("notifications.utils.resend.Emails.send") as send:
            self.assertIsNone(send_notification_email(self.user, "Hi", "Hi", "Hello"))
        send.assert_not_called()

    @override_settings(RESEND_API_KEY="re_test")
    def test_sends_through_resend(self):
        with mock.patch(
            "notifications.utils.resend.Emails.send", return_value={"id": "abc"}
        ) as send:
            response = send_notification_email(self.user, "Loan approved", "Loan approved", "ok")

        self.assertEqual(response, {"id": "abc"})
        params = send.call_args[0][0]
        self.assertEqual(params["to"], ["user@example.com"])
        self.assertEqual(params["subject"], "Loan approved")

    @override_settings(RESEND_API_KEY="re_test")
    def test_delivery_failure_is_swallowed(self):
        with mock.patch(
            "notifications.utils.resend.Emails.send", side_effect=Exception("down")
        ):
            self.assertIsNone(send_notification_email(self.user, "Hi", "Hi", "Hello"))


class NotificationAPITests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="user@example.com", password="password")
        self.other = User.objects.create_user(email="other@example.com", password="password")
        for i in range(3):
            create_notification(self.user, "xp_change", f"Title {i}", "Message")
        self.foreign = create_notification(self.other, "xp_change", "Other", "Message")

    def test_lists_own_notifications_newest_first(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/v1/notifications/", {"limit": 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]["title"], "Title 2")

    def test_mark_read(self):
        notification = Notification.objects.filter(user=self.user).first()
        self.client.force_authenticate(user=self.user)

        response = self.client.patch(f"/api/v1/notifications/{notification.pk}/read/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification.refresh_from_db()
        self.assertTrue(notification.read)

    def test_cannot_mark_someone_elses(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.patch(f"/api/v1/notifications/{self.foreign.pk}/read/")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.foreign.refresh_from_db()
        self.assertFalse(self.foreign.read)
