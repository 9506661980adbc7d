from rest_framework.permissions import BasePermission


class IsSystemAdmin(BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and (
            request.user.is_system_admin or request.user.is_superuser
        )


class IsNotBanned(BasePermission):
    message = "User is banned."

    def has_permission(self, request, view):
        return request.user.is_authenticated and not request.user.is_banned
