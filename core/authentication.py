"""
Token authentication for the REST API.

Kept in its own module so that DRF can import the class from settings
without pulling in any view code.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token auth using the ``Token`` keyword.

    The user's hospital is loaded together with the user since nearly
    every endpoint scopes its queries by it.
    """

    keyword = 'Token'

    def authenticate_credentials(self, key):
        model = self.get_model()
        try:
            token = model.objects.select_related('user', 'user__hospital').get(key=key)
        except model.DoesNotExist:
            raise exceptions.AuthenticationFailed('Invalid token.')
        if not token.user.is_active:
            raise exceptions.AuthenticationFailed('User inactive or deleted.')
        return (token.user, token)
