"""
Authentication backend for hospital-scoped usernames.

Usernames are only unique inside one hospital, so the stock
``ModelBackend`` lookup by username alone is ambiguous.  Callers pass the
tenant explicitly::

    authenticate(request, hospital=hospital, username=..., password=...)

Omitting ``hospital`` matches accounts without one (the platform
super admin).
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class HospitalUserBackend(ModelBackend):

    def authenticate(self, request, username=None, password=None, hospital=None, **kwargs):
        if username is None or password is None:
            return None
        qs = User.objects.filter(username=username)
        if hospital is not None:
            qs = qs.filter(hospital=hospital)
        else:
            qs = qs.filter(hospital__isnull=True)
        user = qs.first()
        if user is None:
            # Run the hasher once to keep timing similar to a real check
            User().set_password(password)
            return None
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
