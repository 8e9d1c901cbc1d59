"""
Platform super admin endpoints: tenants, their users and subscriptions.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Hospital, User
from core.permissions import IsSuperAdmin
from core.serializers.auth import HospitalExpirySerializer, HospitalStatusSerializer
from core.services import hospitals
from core.services.credentials import current_period, hospital_password


def _get_hospital(pk):
    return Hospital.objects.filter(pk=pk).first()


@api_view(['GET'])
@permission_classes([IsSuperAdmin])
def admin_hospitals(request):
    qs = Hospital.objects.order_by('-created_at')
    return Response([hospitals.format_hospital(h, with_password=True) for h in qs])


@api_view(['GET'])
@permission_classes([IsSuperAdmin])
def admin_users(request):
    qs = User.objects.filter(hospital__isnull=False).select_related('hospital').order_by('hospital_id', 'username')
    data = []
    for u in qs:
        row = hospitals.format_user(u)
        row['hospitalName'] = u.hospital.name
        data.append(row)
    return Response(data)


@api_view(['GET'])
@permission_classes([IsSuperAdmin])
def admin_hospital_password(request, pk: int):
    h = _get_hospital(pk)
    if not h:
        return Response({'ok': False, 'detail': 'Hospital not found'}, status=404)
    return Response({
        'ok': True,
        'hospitalId': h.id,
        'hospitalName': h.name,
        'password': hospital_password(h.id),
        'period': current_period(),
    })


@api_view(['PUT'])
@permission_classes([IsSuperAdmin])
def admin_hospital_status(request, pk: int):
    h = _get_hospital(pk)
    if not h:
        return Response({'ok': False, 'detail': 'Hospital not found'}, status=404)
    s = HospitalStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    hospitals.set_status(h, s.validated_data['status'])
    return Response({'ok': True, 'hospital': hospitals.format_hospital(h)})


@api_view(['PUT'])
@permission_classes([IsSuperAdmin])
def admin_hospital_expiry(request, pk: int):
    h = _get_hospital(pk)
    if not h:
        return Response({'ok': False, 'detail': 'Hospital not found'}, status=404)
    s = HospitalExpirySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    hospitals.extend_expiry(h, expiry_date=v.get('expiryDate'), days_to_add=v.get('daysToAdd'))
    return Response({'ok': True, 'hospital': hospitals.format_hospital(h)})
