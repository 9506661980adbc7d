import logging

from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import ValidationError

from accounts.levels import update_user_xp
from notifications.utils import create_notification
from posts.models import Post, PostReaction
from systemsettings.resolver import SettingsResolver

logger = logging.getLogger(__name__)

# Counter column and XP deltas applied when a reaction is added.
REACTION_EFFECTS = {
    "like": {
        "counter": "likes",
        "reactor_xp": -1,
        "owner_xp": 1,
        "title": "Your post was liked!",
        "message": "Someone liked your post. You gained 1 XP!",
        "notification": "post_like",
    },
    "dislike": {
        "counter": "dislikes",
        "reactor_xp": -2,
        "owner_xp": -5,
        "title": "Your post was disliked",
        "message": "Someone disliked your post. You lost 5 XP.",
        "notification": "post_dislike",
    },
}


def _add_reaction(reactor, post, type, settings):
    effects = REACTION_EFFECTS[type]
    reaction = PostReaction.objects.create(user=reactor, post=post, type=type)

    counter = effects["counter"]
    Post.objects.filter(pk=post.pk).update(**{counter: F(counter) + 1})

    update_user_xp(reactor, effects["reactor_xp"], settings)

    owner = post.user
    if owner.pk != reactor.pk:
        update_user_xp(owner, effects["owner_xp"], settings)
        Post.objects.filter(pk=post.pk).update(xp_gained=F("xp_gained") + effects["owner_xp"])
        create_notification(
            owner,
            type=effects["notification"],
            title=effects["title"],
            message=effects["message"],
            data={"post": post.pk, "xp_change": effects["owner_xp"]},
        )
    return reaction


def _remove_reaction(reaction, settings):
    effects = REACTION_EFFECTS[reaction.type]
    post = reaction.post
    reactor = reaction.user
    reaction.delete()

    counter = effects["counter"]
    Post.objects.filter(pk=post.pk, **{f"{counter}__gt": 0}).update(
        **{counter: F(counter) - 1}
    )

    if not settings.reverse_reaction_xp():
        return

    update_user_xp(reactor, -effects["reactor_xp"], settings)
    owner = post.user
    if owner.pk != reactor.pk:
        update_user_xp(owner, -effects["owner_xp"], settings)
        Post.objects.filter(pk=post.pk).update(xp_gained=F("xp_gained") - effects["owner_xp"])


def toggle_reaction(reactor, post, type, settings=None):
    """
    Add, remove or switch ``reactor``'s reaction on ``post``.

    A user holds at most one reaction per post. Reacting with the same type
    again withdraws it; reacting with the other type replaces it. Adding a
    reaction moves XP between reactor and owner (the owner side only when they
    differ). Withdrawing keeps the XP where it is unless ``reverse_reaction_xp``
    is switched on.

    Returns ``{"added": bool, "reaction": PostReaction | None}``.
    """
    if type not in REACTION_EFFECTS:
        raise ValidationError({"type": "Reaction type must be 'like' or 'dislike'."})

    settings = settings or SettingsResolver.from_db()

    with transaction.atomic():
        existing = (
            PostReaction.objects.select_related("user", "post__user")
            .filter(user=reactor, post=post)
            .first()
        )
        if existing is not None:
            _remove_reaction(existing, settings)
            if existing.type == type:
                logger.info(f"User {reactor.email} withdrew {type} on post {post.pk}")
                post.refresh_from_db()
                return {"added": False, "reaction": None}

        reaction = _add_reaction(reactor, post, type, settings)

    logger.info(f"User {reactor.email} reacted {type} on post {post.pk}")
    post.refresh_from_db()
    return {"added": True, "reaction": reaction}
