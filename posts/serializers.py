from rest_framework import serializers

from posts.models import Post, Comment


class AuthorSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    email = serializers.EmailField(read_only=True)
    username = serializers.CharField(read_only=True)
    profile_image_url = serializers.URLField(read_only=True)
    level = serializers.IntegerField(read_only=True)


class CommentSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ["id", "user", "content", "created_at"]
        read_only_fields = ["id", "user", "created_at"]


class PostSerializer(serializers.ModelSerializer):
    user = AuthorSerializer(read_only=True)
    comments = CommentSerializer(many=True, read_only=True)
    user_reaction = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            "id",
            "user",
            "content",
            "image_url",
            "likes",
            "dislikes",
            "xp_gained",
            "user_reaction",
            "comments",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_reaction(self, obj):
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return None
        for reaction in obj.reactions.all():
            if reaction.user_id == request.user.pk:
                return reaction.type
        return None


class PostCreateSerializer(serializers.Serializer):
    content = serializers.CharField()
    image_url = serializers.URLField(required=False, allow_blank=True, allow_null=True)


class ReactionSerializer(serializers.Serializer):
    # Allowed values are checked by toggle_reaction.
    type = serializers.CharField()
