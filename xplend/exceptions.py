import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Wraps DRF's default handler so every error body carries a machine readable
    ``code`` next to ``detail`` and is logged once.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    view = context.get("view")
    view_name = view.__class__.__name__ if view else "unknown"
    code = getattr(exc, "default_code", "error")

    if response.status_code >= 500:
        logger.error(f"{view_name} failed with {code}: {exc}")
    else:
        logger.warning(f"{view_name} refused request with {code}: {exc}")

    if isinstance(response.data, dict):
        response.data.setdefault("code", code)
    else:
        response.data = {"detail": response.data, "code": code}
    return response
