from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from notifications.models import Notification
from notifications.serializers import NotificationSerializer

DEFAULT_LIMIT = 20


class NotificationListView(generics.ListAPIView):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        try:
            limit = int(self.request.query_params.get("limit", DEFAULT_LIMIT))
        except ValueError:
            limit = DEFAULT_LIMIT
        limit = max(1, limit)
        return Notification.objects.filter(user=self.request.user)[:limit]


class NotificationMarkReadView(generics.GenericAPIView):
    queryset = Notification.objects.all()
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return self.queryset.filter(user=self.request.user)

    def patch(self, request, pk):
        notification = self.get_object()
        notification.read = True
        notification.save(update_fields=["read", "updated_at"])
        return Response(
            {"detail": "Notification marked as read."}, status=status.HTTP_200_OK
        )
