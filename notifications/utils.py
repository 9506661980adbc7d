import resend
import logging
from datetime import datetime

from django.conf import settings
from django.template.loader import render_to_string

from notifications.models import Notification

logger = logging.getLogger(__name__)


def create_notification(user, type, title, message, data=None):
    notification = Notification.objects.create(
        user=user, type=type, title=title, message=message, data=data or {}
    )
    logger.info(f"Notification {type} created for {user.email}")
    return notification


def send_notification_email(user, subject, title, message):
    """
    Resend email integration. Delivery is best effort: a failure is logged
    and the caller carries on.
    """
    if not settings.RESEND_API_KEY or not user.email:
        logger.info(f"Email delivery skipped for {user.email}: not configured")
        return None

    try:
        resend.api_key = settings.RESEND_API_KEY
        email_body = render_to_string(
            "notification_email.html",
            {
                "user": user,
                "title": title,
                "message": message,
                "site_url": settings.DOMAIN,
                "current_year": datetime.now().year,
            },
        )
        params = {
            "from": settings.DEFAULT_FROM_EMAIL,
            "to": [user.email],
            "subject": subject,
            "html": email_body,
        }
        response = resend.Emails.send(params)
        logger.info(f"Email sent to {user.email} with response: {response}")
        return response

    except Exception as e:
        logger.error(f"Error sending email to {user.email}: {str(e)}")
        return None
