"""
Patient views: visit list and detail, vitals, the pharmacy queue,
the Excel export and the public prescription portal.

Registration and queue moves happen over the queue socket (see
``core.realtime.consumers``); these endpoints are what dashboards use to
refetch after an event.
"""
from __future__ import annotations

from datetime import datetime, time

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.models import Patient
from core.permissions import IsHospitalUser
from core.serializers.patient import ExportQuerySerializer, PatientListQuerySerializer, VitalSerializer
from core.services import documents, patients as patient_service


def _scoped_patient(request, pk):
    return Patient.objects.filter(hospital_id=request.user.hospital_id, pk=pk).first()


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def list_patients(request):
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    return Response(patient_service.list_patients(
        request.user.hospital_id, phone=v.get('phone'), page=v['page'], limit=v['limit'],
    ))


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def patient_detail(request, pk: int):
    p = _scoped_patient(request, pk)
    if not p:
        return Response({'ok': False, 'detail': 'Patient not found'}, status=404)
    return Response(patient_service.format_patient(p))


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def patient_vitals(request, pk: int):
    p = _scoped_patient(request, pk)
    if not p:
        return Response({'ok': False, 'detail': 'Patient not found'}, status=404)
    if request.method == 'GET':
        return Response([patient_service.format_vital(v) for v in p.vital_records.order_by('-recorded_at', '-id')])
    s = VitalSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vital = patient_service.record_vitals(p, s.validated_data, recorded_by=request.user.username)
    return Response({'ok': True, 'vital': patient_service.format_vital(vital)}, status=201)


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def prescriptions(request):
    """Visits the pharmacy has to look at, in queue order."""
    return Response(patient_service.pharmacy_queue(request.user.hospital_id))


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def export_patients(request):
    q = ExportQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    kind = q.validated_data['type']
    today = timezone.localdate()
    start = today.replace(month=1, day=1) if kind == 'year' else today.replace(day=1)
    since = timezone.make_aware(datetime.combine(start, time.min))
    content = documents.export_patients(request.user.hospital_id, since)
    resp = HttpResponse(content, content_type=documents.XLSX_CONTENT_TYPE)
    resp['Content-Disposition'] = f'attachment; filename="patients_{kind}_{timezone.now():%Y%m%d%H%M%S}.xlsx"'
    return resp


@api_view(['GET'])
@permission_classes([AllowAny])
def public_prescription(request, token: str):
    data = patient_service.public_view(token)
    if data is None:
        return Response({'ok': False, 'detail': 'Prescription not found'}, status=404)
    return Response({'ok': True, **data})
