import logging

from django.db import transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from accounts.levels import update_user_xp
from notifications.utils import create_notification
from posts.models import Post

logger = logging.getLogger(__name__)

POST_XP_COST = 5


def create_post(user, content, image_url=None, settings=None):
    """Publish a post; costs the author ``POST_XP_COST`` XP."""
    if user.is_banned:
        logger.warning(f"Banned user {user.email} tried to post")
        raise PermissionDenied("User is banned.")

    if user.xp < POST_XP_COST:
        raise ValidationError({"detail": "Insufficient XP to create post."})

    with transaction.atomic():
        post = Post.objects.create(user=user, content=content, image_url=image_url or None)
        update_user_xp(user, -POST_XP_COST, settings)

    create_notification(
        user,
        type="post_created",
        title="Post Created",
        message=f"You used {POST_XP_COST} XP to create a post",
        data={"post": post.pk, "xp_change": -POST_XP_COST},
    )
    return post
