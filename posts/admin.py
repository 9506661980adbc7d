from django.contrib import admin

from posts.models import Post, PostReaction, Comment


class PostAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "likes", "dislikes", "xp_gained", "created_at")
    search_fields = ("user__email", "content")
    list_filter = ("created_at",)
    ordering = ("-created_at",)


class PostReactionAdmin(admin.ModelAdmin):
    list_display = ("user", "post", "type", "created_at")
    list_filter = ("type",)


class CommentAdmin(admin.ModelAdmin):
    list_display = ("user", "post", "created_at")
    search_fields = ("user__email", "content")


admin.site.register(Post, PostAdmin)
admin.site.register(PostReaction, PostReactionAdmin)
admin.site.register(Comment, CommentAdmin)
