"""
Token authentication for WebSocket connections.

Browsers cannot set headers on a WebSocket handshake, so dashboards pass
their API token in the query string: ``ws/queue/?token=<key>``.  Without
a token the session user (Django admin login) is used.
"""
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token


@database_sync_to_async
def get_token_user(key: str):
    token = Token.objects.select_related('user', 'user__hospital').filter(key=key).first()
    if token is None or not token.user.is_active:
        return AnonymousUser()
    return token.user


class TokenAuthMiddleware(BaseMiddleware):

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get('query_string', b'').decode())
        key = (query.get('token') or [None])[0]
        if key:
            scope = dict(scope, user=await get_token_user(key))
        return await super().__call__(scope, receive, send)


def TokenAuthMiddlewareStack(inner):
    return AuthMiddlewareStack(TokenAuthMiddleware(inner))
