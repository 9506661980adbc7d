from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsNotBanned
from posts.models import Post, Comment
from posts.serializers import (
    PostSerializer,
    PostCreateSerializer,
    CommentSerializer,
    ReactionSerializer,
)
from posts.reactions import toggle_reaction
from posts.utils import create_post

DEFAULT_LIMIT = 20
MAX_LIMIT = 50


class PostListCreateView(generics.ListCreateAPIView):
    queryset = Post.objects.select_related("user").prefetch_related(
        "comments__user", "reactions"
    )
    serializer_class = PostSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        params = self.request.query_params
        try:
            limit = int(params.get("limit", DEFAULT_LIMIT))
            page = int(params.get("page", 1))
        except ValueError:
            limit, page = DEFAULT_LIMIT, 1
        limit = min(max(1, limit), MAX_LIMIT)
        offset = (max(1, page) - 1) * limit
        return self.queryset[offset : offset + limit]

    def create(self, request, *args, **kwargs):
        serializer = PostCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        post = create_post(
            request.user,
            serializer.validated_data["content"],
            serializer.validated_data.get("image_url"),
        )
        return Response(
            PostSerializer(post, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )


class PostDetailView(generics.RetrieveDestroyAPIView):
    queryset = Post.objects.select_related("user").prefetch_related(
        "comments__user", "reactions"
    )
    serializer_class = PostSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        # Only the author may delete; anyone else gets a 404.
        if self.request.method == "DELETE":
            return self.queryset.filter(user=self.request.user)
        return self.queryset


class PostReactView(generics.GenericAPIView):
    queryset = Post.objects.select_related("user")
    serializer_class = ReactionSerializer
    permission_classes = [IsAuthenticated, IsNotBanned]

    def post(self, request, pk):
        post = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = toggle_reaction(request.user, post, serializer.validated_data["type"])
        reaction = result["reaction"]
        return Response(
            {
                "added": result["added"],
                "reaction": reaction.type if reaction else None,
                "likes": post.likes,
                "dislikes": post.dislikes,
            },
            status=status.HTTP_200_OK,
        )


class CommentListCreateView(generics.ListCreateAPIView):
    serializer_class = CommentSerializer
    permission_classes = [IsAuthenticated, IsNotBanned]

    def get_post(self):
        return generics.get_object_or_404(Post, pk=self.kwargs["pk"])

    def get_queryset(self):
        return Comment.objects.filter(post=self.get_post()).select_related("user")

    def perform_create(self, serializer):
        serializer.save(user=self.request.user, post=self.get_post())
