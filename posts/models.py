from django.db import models
from django.contrib.auth import get_user_model

from accounts.abstracts import TimeStampedModel

User = get_user_model()


class Post(TimeStampedModel):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="posts")
    content = models.TextField()
    image_url = models.URLField(max_length=500, blank=True, null=True)
    likes = models.PositiveIntegerField(default=0)
    dislikes = models.PositiveIntegerField(default=0)
    # Net XP the owner has received through reactions on this post.
    xp_gained = models.IntegerField(default=0)

    class Meta:
        verbose_name = "Post"
        verbose_name_plural = "Posts"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Post {self.pk} by {self.user.email}"


class PostReaction(TimeStampedModel):
    TYPE_CHOICES = [
        ("like", "Like"),
        ("dislike", "Dislike"),
    ]

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="post_reactions"
    )
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="reactions")
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)

    class Meta:
        verbose_name = "Post Reaction"
        verbose_name_plural = "Post Reactions"
        constraints = [
            models.UniqueConstraint(fields=["user", "post"], name="unique_post_reaction"),
        ]

    def __str__(self):
        return f"{self.user.email} {self.type}d post {self.post_id}"


class Comment(TimeStampedModel):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="comments")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="comments")
    content = models.TextField()

    class Meta:
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Comment by {self.user.email} on post {self.post_id}"
