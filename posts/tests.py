from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.test import APITestCase

from notifications.models import Notification
from posts.models import Post, PostReaction, Comment
from posts.reactions import toggle_reaction
from posts.utils import create_post
from systemsettings.resolver import SettingsResolver

User = get_user_model()


class ToggleReactionTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="password")
        self.reactor = User.objects.create_user(email="reactor@example.com", password="password")
        self.post = Post.objects.create(user=self.owner, content="Hello")
        self.defaults = SettingsResolver({})

    def refresh(self):
        for obj in (self.owner, self.reactor, self.post):
            obj.refresh_from_db()

    def test_like_moves_xp_to_owner(self):
        result = toggle_reaction(self.reactor, self.post, "like", self.defaults)

        self.refresh()
        self.assertTrue(result["added"])
        self.assertEqual(result["reaction"].type, "like")
        self.assertEqual(self.post.likes, 1)
        self.assertEqual(self.reactor.xp, 99)
        self.assertEqual(self.owner.xp, 101)
        self.assertEqual(self.post.xp_gained, 1)
        self.assertTrue(
            Notification.objects.filter(user=self.owner, type="post_like").exists()
        )

    def test_like_toggled_off_keeps_xp(self):
        toggle_reaction(self.reactor, self.post, "like", self.defaults)
        result = toggle_reaction(self.reactor, self.post, "like", self.defaults)

        self.refresh()
        self.assertFalse(result["added"])
        self.assertIsNone(result["reaction"])
        self.assertEqual(self.post.likes, 0)
        self.assertEqual(self.reactor.xp, 99)
        self.assertEqual(self.owner.xp, 101)
        self.assertFalse(PostReaction.objects.exists())

    def test_like_toggled_off_reverses_xp_when_enabled(self):
        settings = SettingsResolver({"reverse_reaction_xp": "true"})

        toggle_reaction(self.reactor, self.post, "like", settings)
        toggle_reaction(self.reactor, self.post, "like", settings)

        self.refresh()
        self.assertEqual(self.post.likes, 0)
        self.assertEqual(self.reactor.xp, 100)
        self.assertEqual(self.owner.xp, 100)
        self.assertEqual(self.post.xp_gained, 0)

    def test_dislike_costs_both_sides(self):
        toggle_reaction(self.reactor, self.post, "dislike", self.defaults)

        self.refresh()
        self.assertEqual(self.post.dislikes, 1)
        self.assertEqual(self.reactor.xp, 98)
        self.assertEqual(self.owner.xp, 95)
        self.assertTrue(
            Notification.objects.filter(user=self.owner, type="post_dislike").exists()
        )

    def test_switching_reaction_type(self):
        toggle_reaction(self.reactor, self.post, "like", self.defaults)
        result = toggle_reaction(self.reactor, self.post, "dislike", self.defaults)

        self.refresh()
        self.assertTrue(result["added"])
        self.assertEqual(self.post.likes, 0)
        self.assertEqual(self.post.dislikes, 1)
        self.assertEqual(PostReaction.objects.get().type, "dislike")
        self.assertEqual(self.reactor.xp, 97)
        self.assertEqual(self.owner.xp, 96)

    def test_reacting_to_own_post_skips_owner_side(self):
        toggle_reaction(self.owner, self.post, "like", self.defaults)

        self.refresh()
        self.assertEqual(self.post.likes, 1)
        self.assertEqual(self.owner.xp, 99)
        self.assertEqual(self.post.xp_gained, 0)
        self.assertFalse(Notification.objects.filter(type="post_like").exists())

    def test_owner_levels_up_from_likes(self):
        self.owner.xp = 499
        self.owner.save()

        toggle_reaction(self.reactor, self.post, "like", self.defaults)

        self.refresh()
        self.assertEqual(self.owner.level, 2)
        self.assertEqual(
            Notification.objects.filter(user=self.owner, type="level_up").count(), 1
        )

    def test_invalid_type_is_refused(self):
        with self.assertRaises(ValidationError):
            toggle_reaction(self.reactor, self.post, "love", self.defaults)

        self.refresh()
        self.assertEqual(self.reactor.xp, 100)
        self.assertFalse(PostReaction.objects.exists())


class CreatePostTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="author@example.com", password="password")

    def test_post_costs_xp(self):
        post = create_post(self.user, "First post", settings=SettingsResolver({}))

        self.user.refresh_from_db()
        self.assertEqual(post.content, "First post")
        self.assertEqual(self.user.xp, 95)
        self.assertTrue(
            Notification.objects.filter(user=self.user, type="post_created").exists()
        )

    def test_insufficient_xp(self):
        self.user.xp = 4
        self.user.save()

        with self.assertRaises(ValidationError):
            create_post(self.user, "Too poor")
        self.assertFalse(Post.objects.exists())

    def test_banned_user_cannot_post(self):
        self.user.is_banned = True
        self.user.save()

        with self.assertRaises(PermissionDenied):
            create_post(self.user, "Banned")
        self.assertFalse(Post.objects.exists())


class PostAPITests(APITestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@example.com", password="password")
        self.reactor = User.objects.create_user(email="reactor@example.com", password="password")

    def test_create_and_list_posts(self):
        self.client.force_authenticate(user=self.owner)

        response = self.client.post("/api/v1/posts/", {"content": "Hi all"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get("/api/v1/posts/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["content"], "Hi all")
        self.assertIsNone(response.data[0]["user_reaction"])

    def test_react_and_comment(self):
        post = Post.objects.create(user=self.owner, content="Hello")
        self.client.force_authenticate(user=self.reactor)

        response = self.client.post(
            f"/api/v1/posts/{post.pk}/react/", {"type": "like"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["added"])
        self.assertEqual(response.data["likes"], 1)

        response = self.client.post(
            f"/api/v1/posts/{post.pk}/comments/", {"content": "Nice"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Comment.objects.filter(post=post).count(), 1)

        response = self.client.get(f"/api/v1/posts/{post.pk}/")
        self.assertEqual(response.data["user_reaction"], "like")
        self.assertEqual(len(response.data["comments"]), 1)

    def test_invalid_reaction_type(self):
        post = Post.objects.create(user=self.owner, content="Hello")
        self.client.force_authenticate(user=self.reactor)

        response = self.client.post(
            f"/api/v1/posts/{post.pk}/react/", {"type": "love"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_author_can_delete(self):
        post = Post.objects.create(user=self.owner, content="Hello")

        self.client.force_authenticate(user=self.reactor)
        response = self.client.delete(f"/api/v1/posts/{post.pk}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.owner)
        response = self.client.delete(f"/api/v1/posts/{post.pk}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Post.objects.exists())

    def test_banned_user_cannot_react(self):
        post = Post.objects.create(user=self.owner, content="Hello")
        self.reactor.is_banned = True
        self.reactor.save()
        self.client.force_authenticate(user=self.reactor)

        response = self.client.post(
            f"/api/v1/posts/{post.pk}/react/", {"type": "like"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
