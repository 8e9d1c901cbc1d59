"""
Custom permission classes for role and tenant based access control.
"""
from rest_framework.permissions import BasePermission

from .models import Hospital, User


class IsHospitalUser(BasePermission):
    """Staff of a hospital whose subscription is active."""
    message = 'Hospital subscription is not active'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated and getattr(user, "hospital_id", None)):
            return False
        return user.hospital.subscription_status == Hospital.STATUS_ACTIVE


class IsHospitalAdmin(IsHospitalUser):
    """Hospital staff with the ``admin`` role."""
    message = 'Hospital administrator role required'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return super().has_permission(request, view) and request.user.role == User.ROLE_ADMIN


class IsSuperAdmin(BasePermission):
    """Only the platform super admin."""
    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == User.ROLE_SUPERADMIN)
