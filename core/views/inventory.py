"""
Pharmacy inventory and appointment book.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Appointment, Inventory, Patient
from core.permissions import IsHospitalUser
from core.serializers.inventory import (
    AppointmentQuerySerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    InventorySerializer,
    StockAdjustSerializer,
)
from core.services import inventory


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def inventory_list(request):
    hid = request.user.hospital_id
    if request.method == 'GET':
        items = Inventory.objects.filter(hospital_id=hid).order_by('medication_name', 'expiry_date')
        return Response([inventory.format_item(i) for i in items])
    s = InventorySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = inventory.add_item(hid, s.validated_data)
    return Response({'ok': True, 'item': inventory.format_item(item)}, status=201)


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def inventory_adjust(request, pk: int):
    item = Inventory.objects.filter(hospital_id=request.user.hospital_id, pk=pk).first()
    if not item:
        return Response({'ok': False, 'detail': 'Item not found'}, status=404)
    s = StockAdjustSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        item = inventory.adjust_stock(item, s.validated_data['delta'])
    except ValueError as e:
        return Response({'ok': False, 'detail': str(e)}, status=400)
    return Response({'ok': True, 'item': inventory.format_item(item)})


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def appointments(request):
    hid = request.user.hospital_id
    if request.method == 'GET':
        q = AppointmentQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(inventory.list_appointments(
            hid, on_date=q.validated_data.get('date'), status=q.validated_data.get('status'),
        ))
    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        a = inventory.book_appointment(hid, s.validated_data)
    except Patient.DoesNotExist:
        return Response({'ok': False, 'detail': 'Patient not found'}, status=404)
    return Response({'ok': True, 'appointment': inventory.format_appointment(a)}, status=201)


@api_view(['POST'])
@permission_classes([IsHospitalUser])
def appointment_status(request, pk: int):
    a = Appointment.objects.filter(hospital_id=request.user.hospital_id, pk=pk).first()
    if not a:
        return Response({'ok': False, 'detail': 'Appointment not found'}, status=404)
    s = AppointmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    a.status = s.validated_data['status']
    a.save(update_fields=['status'])
    return Response({'ok': True, 'appointment': inventory.format_appointment(a)})
