"""
Lab workflow: requests, sample handling, processing and results.

Status fields are assigned directly from the dashboard; only the value
set is validated (by the serializers), never the order of transitions.
Every write drops the cached dashboard counters and tells the lab room
to refetch.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.models import LabInventory, LabResult, LabTest, LabTestType, Patient
from core.services import directory
from core.services.realtime import LAB, broadcast

logger = logging.getLogger(__name__)

PRESCRIPTION_TEST_NAME = 'Lab Test Request (from Prescription)'
MANUAL_TEST_NAME = 'Manual Lab Request'


def _stats_key(hospital_id: int) -> str:
    return f"lab:stats:{hospital_id}"


def _changed(hospital_id: int, test_id: Optional[int] = None) -> None:
    cache.delete(_stats_key(hospital_id))
    broadcast(hospital_id, 'lab-update', {'testId': test_id}, rooms=[LAB])


def _iso(dt):
    return dt.isoformat() if dt else None


def format_result(r: LabResult) -> dict:
    return {
        'id': r.id,
        'testId': r.test_id,
        'parameterName': r.parameter_name,
        'value': r.value,
        'unit': r.unit,
        'referenceRange': r.reference_range,
        'isAbnormal': r.is_abnormal,
        'notes': r.notes,
    }


def format_test(t: LabTest, *, with_results: bool = False) -> dict:
    data = {
        'id': t.id,
        'hospitalId': t.hospital_id,
        'patientId': t.patient_id,
        'testName': t.test_name,
        'testType': t.test_type,
        'orderedBy': t.ordered_by,
        'orderedAt': _iso(t.ordered_at),
        'status': t.status,
        'result': t.result,
        'resultDate': _iso(t.result_date),
        'priority': t.priority,
        'sampleStatus': t.sample_status,
        'technicianId': t.technician_id,
        'machineId': t.machine_id,
        'sampleCollectedAt': _iso(t.sample_collected_at),
        'sampleCollectedBy': t.sample_collected_by,
        'rejectionReason': t.rejection_reason,
        'startedAt': _iso(t.started_at),
        'completedAt': _iso(t.completed_at),
    }
    p = t.patient
    if p is not None:
        data.update({
            'patientName': p.name,
            'patientAge': p.age,
            'patientGender': p.gender,
            'patientPhone': p.phone,
        })
    if with_results:
        data['results'] = [format_result(r) for r in t.results.order_by('id')]
    return data


def create_test(hospital_id: int, *, patient: Patient, test_name: str, ordered_by: str = '',
                priority: str = 'normal', test_type: str = '') -> LabTest:
    test = LabTest.objects.create(
        hospital_id=hospital_id,
        patient=patient,
        test_name=test_name,
        test_type=test_type,
        ordered_by=ordered_by,
        status=LabTest.STATUS_PENDING,
        priority=priority,
        sample_status='pending',
    )
    _changed(hospital_id, test.id)
    return test


def create_request(hospital_id: int, *, patient_id: int, test_name: str = '', doctor_id=None,
                   priority: str = 'normal') -> LabTest:
    """Manual request from a doctor's dashboard.  Raises Patient.DoesNotExist."""
    patient = Patient.objects.get(hospital_id=hospital_id, id=patient_id)
    test = create_test(
        hospital_id, patient=patient,
        test_name=test_name or MANUAL_TEST_NAME,
        ordered_by=directory.doctor_name(doctor_id),
        priority=priority,
    )
    logger.info("lab request created patient=%s test=%s", patient.id, test.id)
    return test


def stats(hospital_id: int) -> dict:
    key = _stats_key(hospital_id)
    data = cache.get(key)
    if data is not None:
        return data
    qs = LabTest.objects.filter(hospital_id=hospital_id)
    data = {
        'pending': qs.filter(status=LabTest.STATUS_PENDING).count(),
        'inProgress': qs.filter(status=LabTest.STATUS_IN_PROGRESS).count(),
        'completed': qs.filter(status=LabTest.STATUS_COMPLETED).count(),
        'urgent': qs.filter(priority='urgent').exclude(status=LabTest.STATUS_COMPLETED).count(),
        'samplesToCollect': qs.filter(sample_status='pending').count(),
    }
    cache.set(key, data, settings.LAB_STATS_CACHE_SECONDS)
    return data


def list_tests(hospital_id: int, *, status: Optional[str] = None, on_date: Optional[date] = None,
               search: Optional[str] = None) -> list[dict]:
    qs = LabTest.objects.filter(hospital_id=hospital_id).select_related('patient')
    if status and status != 'all':
        qs = qs.filter(status=status)
    if on_date:
        qs = qs.filter(ordered_at__date=on_date)
    if search:
        qs = qs.filter(Q(patient__name__icontains=search) | Q(patient__phone__icontains=search))
    # 'urgent' sorts after 'normal', so descending puts urgent first
    return [format_test(t) for t in qs.order_by('-priority', '-ordered_at', '-id')]


def get_test(hospital_id: int, pk: int) -> LabTest:
    return LabTest.objects.select_related('patient').get(hospital_id=hospital_id, pk=pk)


def assign(test: LabTest, technician_id) -> LabTest:
    test.technician_id = technician_id or None
    test.save(update_fields=['technician_id'])
    _changed(test.hospital_id, test.id)
    return test


def update_sample(test: LabTest, status: str, *, rejection_reason: str = '', collected_by: str = '') -> LabTest:
    test.sample_status = status
    test.sample_collected_by = collected_by or 'Unknown'
    test.sample_collected_at = timezone.now()
    fields = ['sample_status', 'sample_collected_by', 'sample_collected_at']
    if status == 'rejected':
        test.rejection_reason = rejection_reason
        fields.append('rejection_reason')
    test.save(update_fields=fields)
    _changed(test.hospital_id, test.id)
    return test


def update_process(test: LabTest, status: str, *, machine_id: Optional[str] = None) -> LabTest:
    test.status = status
    fields = ['status']
    if status == LabTest.STATUS_IN_PROGRESS:
        test.started_at = timezone.now()
        test.machine_id = machine_id or None
        fields += ['started_at', 'machine_id']
    elif status == LabTest.STATUS_COMPLETED:
        test.completed_at = timezone.now()
        fields.append('completed_at')
    test.save(update_fields=fields)
    _changed(test.hospital_id, test.id)
    return test


def set_status(test: LabTest, status: str, *, rejection_reason: str = '') -> LabTest:
    test.status = status
    fields = ['status']
    if status == LabTest.STATUS_REJECTED:
        test.rejection_reason = rejection_reason
        fields.append('rejection_reason')
    elif status == LabTest.STATUS_COMPLETED and not test.completed_at:
        test.completed_at = timezone.now()
        fields.append('completed_at')
    test.save(update_fields=fields)
    _changed(test.hospital_id, test.id)
    return test


def save_results(test: LabTest, results: Iterable[dict]) -> LabTest:
    """Replace the test's results and mark it completed."""
    now = timezone.now()
    with transaction.atomic():
        test.results.all().delete()
        LabResult.objects.bulk_create([
            LabResult(
                test=test,
                parameter_name=r['parameterName'],
                value=r.get('value') or '',
                unit=r.get('unit') or '',
                reference_range=r.get('referenceRange') or '',
                is_abnormal=bool(r.get('isAbnormal')),
                notes=r.get('notes') or '',
            )
            for r in results
        ])
        test.status = LabTest.STATUS_COMPLETED
        test.result_date = now
        fields = ['status', 'result_date']
        if not test.completed_at:
            test.completed_at = now
            fields.append('completed_at')
        test.save(update_fields=fields)
    _changed(test.hospital_id, test.id)
    return test


# -- inventory & catalogue -------------------------------------------------

def format_lab_item(i: LabInventory) -> dict:
    return {
        'id': i.id,
        'itemName': i.item_name,
        'batchNumber': i.batch_number,
        'quantity': i.quantity,
        'unit': i.unit,
        'expiryDate': i.expiry_date,
        'minLevel': i.min_level,
        'status': i.status,
        'addedAt': _iso(i.added_at),
        'updatedAt': _iso(i.updated_at),
    }


def add_lab_item(hospital_id: int, v: dict) -> LabInventory:
    item = LabInventory.objects.create(
        hospital_id=hospital_id,
        item_name=v['itemName'],
        quantity=v['quantity'],
        unit=v['unit'],
        min_level=v['minLevel'],
        batch_number=v['batchNumber'],
        expiry_date=v['expiryDate'],
    )
    broadcast(hospital_id, 'lab-update', {'inventoryId': item.id}, rooms=[LAB])
    return item


def format_test_type(t: LabTestType) -> dict:
    return {
        'id': t.id,
        'name': t.name,
        'category': t.category,
        'parameters': t.parameters or [],
        'price': float(t.price or 0),
        'turnaroundTime': t.turnaround_time,
    }


def add_test_type(hospital_id: int, v: dict) -> LabTestType:
    return LabTestType.objects.create(
        hospital_id=hospital_id,
        name=v['name'],
        category=v['category'],
        parameters=v['parameters'],
        price=v['price'],
        turnaround_time=v.get('turnaroundTime'),
    )
