import logging
from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response
from django.contrib.auth import get_user_model, authenticate
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.authtoken.models import Token

from accounts.serializers import (
    BaseUserSerializer,
    CurrentUserSerializer,
    UserLoginSerializer,
    XPAdjustmentSerializer,
    BanSerializer,
    MembershipSerializer,
)
from accounts.permissions import IsSystemAdmin
from accounts.levels import apply_admin_xp_change
from loans.models import Loan
from posts.models import Post

logger = logging.getLogger(__name__)

User = get_user_model()

"""
Authentication
"""


class TokenView(APIView):
    permission_classes = (AllowAny,)
    serializer_class = UserLoginSerializer

    def post(self, request, format=None):
        serializer = self.serializer_class(data=request.data)

        if serializer.is_valid():
            email = serializer.validated_data["email"]
            password = serializer.validated_data["password"]

            user = authenticate(request, email=email, password=password)

            if user:
                token, created = Token.objects.get_or_create(user=user)
                user_details = {
                    "id": user.id,
                    "email": user.email,
                    "username": user.username,
                    "first_name": user.first_name,
                    "last_name": user.last_name,
                    "reference": user.reference,
                    "xp": user.xp,
                    "level": user.level,
                    "is_banned": user.is_banned,
                    "is_system_admin": user.is_system_admin,
                    "is_active": user.is_active,
                    "is_staff": user.is_staff,
                    "is_superuser": user.is_superuser,
                    "last_login": user.last_login,
                    "token": token.key,
                }
                return Response(user_details, status=status.HTTP_200_OK)
            else:
                logger.warning(f"Failed login attempt for {email}")
                return Response(
                    {"detail": ("Unable to log in with provided credentials.")},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


"""
Create and Detail Views
"""


class UserCreateView(generics.CreateAPIView):
    permission_classes = (AllowAny,)
    serializer_class = BaseUserSerializer
    queryset = User.objects.all()

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info(f"New user registered: {user.email}")


class CurrentUserView(generics.RetrieveUpdateAPIView):
    """
    The signed-in user's profile with their current borrowing capacity.
    """

    permission_classes = (IsAuthenticated,)
    serializer_class = CurrentUserSerializer

    def get_object(self):
        return self.request.user


"""
System admin views
- List users
- Adjust XP, ban, mark membership
- System stats
"""


class UserListView(generics.ListAPIView):
    permission_classes = (IsSystemAdmin,)
    serializer_class = BaseUserSerializer
    queryset = User.objects.all()


class UserXPView(generics.GenericAPIView):
    permission_classes = (IsSystemAdmin,)
    serializer_class = XPAdjustmentSerializer
    queryset = User.objects.all()
    lookup_field = "id"

    def patch(self, request, id):
        user = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = apply_admin_xp_change(
            user, serializer.validated_data["xp_change"], request.user
        )
        return Response(BaseUserSerializer(user).data, status=status.HTTP_200_OK)


class UserBanView(generics.GenericAPIView):
    permission_classes = (IsSystemAdmin,)
    serializer_class = BanSerializer
    queryset = User.objects.all()
    lookup_field = "id"

    def patch(self, request, id):
        user = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user.is_banned = serializer.validated_data["is_banned"]
        user.save(update_fields=["is_banned", "updated_at"])
        logger.info(
            f"Admin {request.user.email} set is_banned={user.is_banned} for {user.email}"
        )
        return Response(BaseUserSerializer(user).data, status=status.HTTP_200_OK)


class UserMembershipView(generics.GenericAPIView):
    permission_classes = (IsSystemAdmin,)
    serializer_class = MembershipSerializer
    queryset = User.objects.all()
    lookup_field = "id"

    def patch(self, request, id):
        user = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user.membership_paid = serializer.validated_data["membership_paid"]
        user.save(update_fields=["membership_paid", "updated_at"])
        logger.info(
            f"Admin {request.user.email} set membership_paid={user.membership_paid} for {user.email}"
        )
        return Response(BaseUserSerializer(user).data, status=status.HTTP_200_OK)


class SystemStatsView(APIView):
    permission_classes = (IsSystemAdmin,)

    def get(self, request, format=None):
        stats = {
            "total_users": User.objects.count(),
            "total_posts": Post.objects.count(),
            "total_loans": Loan.objects.count(),
            "active_loans": Loan.objects.filter(status="approved").count(),
            "pending_loans": Loan.objects.filter(status="pending").count(),
        }
        return Response(stats, status=status.HTTP_200_OK)
