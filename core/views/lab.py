"""
Lab dashboard endpoints.

All routes are scoped to the caller's hospital; a test id from another
hospital answers 404.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import LabInventory, LabTest, LabTestType
from core.permissions import IsHospitalUser
from core.serializers.lab import (
    AssignSerializer,
    LabInventorySerializer,
    LabTestQuerySerializer,
    LabTestTypeSerializer,
    ProcessSerializer,
    ResultsSerializer,
    SampleSerializer,
    StatusSerializer,
)
from core.services import lab


def _not_found():
    return Response({'ok': False, 'detail': 'Test not found'}, status=404)


def _load(request, pk):
    try:
        return lab.get_test(request.user.hospital_id, pk)
    except LabTest.DoesNotExist:
        return None


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def lab_stats(request):
    return Response(lab.stats(request.user.hospital_id))


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def lab_tests(request):
    q = LabTestQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    return Response(lab.list_tests(
        request.user.hospital_id, status=v.get('status'), on_date=v.get('date'), search=v.get('search'),
    ))


@api_view(['GET'])
@permission_classes([IsHospitalUser])
def lab_test_detail(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    return Response(lab.format_test(test, with_results=True))


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def lab_test_assign(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    s = AssignSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lab.assign(test, s.validated_data['technicianId'])
    return Response({'ok': True, 'success': True})


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def lab_test_sample(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    s = SampleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    lab.update_sample(test, v['status'], rejection_reason=v['rejectionReason'], collected_by=request.user.username)
    return Response({'ok': True, 'success': True})


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def lab_test_process(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    s = ProcessSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lab.update_process(test, s.validated_data['status'], machine_id=s.validated_data.get('machineId'))
    return Response({'ok': True, 'success': True})


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def lab_test_status(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    s = StatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lab.set_status(test, s.validated_data['status'], rejection_reason=s.validated_data['rejectionReason'])
    return Response({'ok': True, 'success': True})


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def lab_test_results(request, pk: int):
    test = _load(request, pk)
    if not test:
        return _not_found()
    if not isinstance(request.data.get('results'), list):
        return Response({'ok': False, 'detail': 'Invalid results data'}, status=400)
    s = ResultsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    lab.save_results(test, s.validated_data['results'])
    return Response({'ok': True, 'success': True})


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def lab_inventory(request):
    hid = request.user.hospital_id
    if request.method == 'GET':
        items = LabInventory.objects.filter(hospital_id=hid).order_by('item_name')
        return Response([lab.format_lab_item(i) for i in items])
    s = LabInventorySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = lab.add_lab_item(hid, s.validated_data)
    return Response({'ok': True, 'success': True, 'id': item.id}, status=201)


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def lab_test_types(request):
    hid = request.user.hospital_id
    if request.method == 'GET':
        types = LabTestType.objects.filter(hospital_id=hid).order_by('name')
        return Response([lab.format_test_type(t) for t in types])
    s = LabTestTypeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    t = lab.add_test_type(hid, s.validated_data)
    return Response({'ok': True, 'success': True, 'id': t.id}, status=201)
