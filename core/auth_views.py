"""
Authentication views.

Staff sign in with three secrets: the hospital's monthly password
(identifies the tenant), their username and their own password.  The
platform super admin signs in with the configured super admin password.
Both receive a DRF token plus a JWT pair, as the dashboards accept
either.  Kept apart from ``core.authentication`` so DRF can import the
authentication class without importing views.
"""
from __future__ import annotations

import logging

from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.serializers.auth import AdminLoginSerializer, LoginSerializer
from core.services import hospitals
from core.services.credentials import verify_superadmin_password

logger = logging.getLogger(__name__)


def _token_payload(user) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': hospitals.format_user(user),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        user, h = hospitals.login_staff(
            request,
            hospital_secret=vd['hospitalPassword'],
            username=vd['username'],
            password=vd['userPassword'],
        )
    except hospitals.LoginError as e:
        logger.warning("login refused user=%s ip=%s: %s", vd['username'], request.META.get('REMOTE_ADDR'), e)
        return Response({'ok': False, 'detail': str(e)}, status=e.status)

    payload = _token_payload(user)
    payload['hospital'] = {'id': h.id, 'name': h.name}
    return Response(payload, status=200)

# DRF ScopedRateThrottle reads throttle_scope from the generated view class
login_view.cls.throttle_scope = 'login'


@api_view(['POST'])
@permission_classes([AllowAny])
def admin_login_view(request):
    s = AdminLoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    if not verify_superadmin_password(s.validated_data['password']):
        logger.warning("super admin login refused ip=%s", request.META.get('REMOTE_ADDR'))
        return Response({'ok': False, 'detail': 'Invalid password'}, status=401)
    user = hospitals.get_or_create_superadmin()
    return Response(_token_payload(user), status=200)

admin_login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([AllowAny])
def auth_status(request):
    user = request.user
    if not (user and user.is_authenticated):
        return Response({'ok': True, 'authenticated': False})
    data = {'ok': True, 'authenticated': True, 'user': hospitals.format_user(user)}
    if user.hospital_id:
        data['hospital'] = {
            'id': user.hospital_id,
            'name': user.hospital.name,
            'subscriptionStatus': user.hospital.subscription_status,
        }
    return Response(data)


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Drop the DRF token and blacklist refresh tokens (all, or the one given)."""
    Token.objects.filter(user=request.user).delete()
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            return Response({'ok': False, 'detail': str(e)}, status=400)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    return Response({'ok': True, 'blacklisted': count})
