"""
Hospital registration and the hospital admin's own endpoints.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.models import Hospital, User
from core.permissions import IsHospitalAdmin, IsHospitalUser
from core.serializers.auth import HospitalRegisterSerializer, StaffUserSerializer
from core.services import hospitals
from core.services.credentials import hospital_password


@api_view(['POST'])
@permission_classes([AllowAny])
def register_hospital(request):
    """Sign up a new hospital on a trial subscription.

    The response carries this month's hospital password, which the
    admin needs for the first login.
    """
    s = HospitalRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        h, admin = hospitals.register_hospital(**s.validated_data)
    except ValueError as e:
        return Response({'ok': False, 'detail': str(e)}, status=400)
    return Response({
        'ok': True,
        'hospitalId': h.id,
        'hospitalPassword': hospital_password(h.id),
        'subscriptionExpiry': h.subscription_expiry.isoformat(),
        'admin': hospitals.format_user(admin),
    }, status=201)

register_hospital.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([AllowAny])
def list_hospitals(request):
    data = [{'id': h.id, 'name': h.name, 'email': h.email}
            for h in Hospital.objects.order_by('name')]
    return Response(data)


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def hospital_info(request):
    return Response({'ok': True, 'hospital': hospitals.format_hospital(request.user.hospital)})


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalAdmin])
def hospital_users(request):
    h = request.user.hospital
    if request.method == 'GET':
        users = User.objects.filter(hospital=h).order_by('username')
        return Response([hospitals.format_user(u) for u in users])

    s = StaffUserSerializer(data=request.data, context={'hospital': h})
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = User.objects.create_user(
        username=v['username'], password=v['password'], email=v['email'],
        hospital=h, role=v['role'],
    )
    return Response({'ok': True, 'user': hospitals.format_user(user)}, status=201)
