import logging

from django.db.models import F
from django.utils import timezone

from systemsettings.resolver import SettingsResolver
from notifications.utils import create_notification

logger = logging.getLogger(__name__)


def level_for_xp(xp, settings=None):
    """
    Highest level whose XP threshold is at or below ``xp``.

    Thresholds come from ``level_N_required_xp`` (0/500/1500/3000 by default).
    XP below every threshold maps to level 1.
    """
    settings = settings or SettingsResolver.from_db()
    level = 1
    for threshold, tier in settings.level_thresholds():
        if xp >= threshold:
            level = tier
    return level


def update_user_level(user, settings=None):
    """
    Raise the stored level when the user's XP has crossed a higher threshold.

    Levels only ever go up: a drop in XP never demotes. Calling this again with
    unchanged XP is a no-op, so a level-up is announced exactly once.
    """
    new_level = level_for_xp(user.xp, settings)
    old_level = user.level

    if new_level <= old_level:
        return user

    user.level = new_level
    user.save(update_fields=["level", "updated_at"])
    logger.info(f"User {user.email} levelled up from {old_level} to {new_level}")

    create_notification(
        user,
        type="level_up",
        title="Level Up!",
        message=f"Congratulations! You've reached Level {new_level}",
        data={"old_level": old_level, "new_level": new_level},
    )
    return user


def update_user_xp(user, xp_change, settings=None):
    """
    Apply ``xp_change`` with a column-level increment, then re-check the level.
    """
    type(user).objects.filter(pk=user.pk).update(
        xp=F("xp") + xp_change, updated_at=timezone.now()
    )
    user.refresh_from_db(fields=["xp", "level"])
    logger.info(f"User {user.email} XP changed by {xp_change} to {user.xp}")
    return update_user_level(user, settings)


def apply_admin_xp_change(user, xp_change, admin, settings=None):
    user = update_user_xp(user, xp_change, settings)
    direction = "increased" if xp_change > 0 else "decreased"
    create_notification(
        user,
        type="admin_xp_change",
        title="XP Updated by Admin",
        message=f"Your XP was {direction} by {abs(xp_change)} by an administrator",
        data={"xp_change": xp_change},
    )
    logger.info(f"Admin {admin.email} changed XP of {user.email} by {xp_change}")
    return user
