from django.urls import path

from posts.views import (
    PostListCreateView,
    PostDetailView,
    PostReactView,
    CommentListCreateView,
)

app_name = "posts"

urlpatterns = [
    path("", PostListCreateView.as_view(), name="post-list-create"),
    path("<int:pk>/", PostDetailView.as_view(), name="post-detail"),
    path("<int:pk>/react/", PostReactView.as_view(), name="post-react"),
    path(
        "<int:pk>/comments/",
        CommentListCreateView.as_view(),
        name="post-comments",
    ),
]
