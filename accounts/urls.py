from django.urls import path

from accounts.views import (
    TokenView,
    UserCreateView,
    CurrentUserView,
    UserListView,
    UserXPView,
    UserBanView,
    UserMembershipView,
    SystemStatsView,
)

app_name = "accounts"

urlpatterns = [
    path("token/", TokenView.as_view(), name="token"),
    path("signup/", UserCreateView.as_view(), name="signup"),
    path("me/", CurrentUserView.as_view(), name="me"),
    # System admin activities
    path("users/", UserListView.as_view(), name="users"),
    path("users/<uuid:id>/xp/", UserXPView.as_view(), name="user-xp"),
    path("users/<uuid:id>/ban/", UserBanView.as_view(), name="user-ban"),
    path(
        "users/<uuid:id>/membership/",
        UserMembershipView.as_view(),
        name="user-membership",
    ),
    path("stats/", SystemStatsView.as_view(), name="stats"),
]
