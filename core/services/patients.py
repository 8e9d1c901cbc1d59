"""
Patient visits: registration, queue movement and prescriptions.

These functions back both the queue socket and the REST views.  They
take the caller's hospital id and never touch another tenant's rows.
Each mutation broadcasts to the hospital's rooms once the row is saved.
"""
from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, time
from typing import Optional

from django.db.models import Q
from django.utils import timezone

from core.models import LabTest, Patient, Vital
from core.serializers.patient import (
    MovePatientSerializer,
    PatientRegisterSerializer,
    UpdatePrescriptionSerializer,
)
from core.services import directory, lab
from core.services.realtime import DOCTORS, PHARMACY, RECEPTION, broadcast

logger = logging.getLogger(__name__)

# A prescription mentioning any of these asks for a lab work-up
LAB_KEYWORDS = ('test', 'lab', 'cbc', 'blood', 'urine', 'x-ray', 'scan', 'profile', 'panel')
_LAB_RE = re.compile('|'.join(re.escape(k) for k in LAB_KEYWORDS), re.IGNORECASE)


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'hospitalId': p.hospital_id,
        'token': p.token,
        'name': p.name,
        'age': p.age,
        'gender': p.gender,
        'phone': p.phone,
        'address': p.address,
        'bloodGroup': p.blood_group,
        'emergencyContact': p.emergency_contact,
        'emergencyPhone': p.emergency_phone,
        'insuranceId': p.insurance_id,
        'medicalHistory': p.medical_history,
        'allergies': p.allergies,
        'chronicConditions': p.chronic_conditions,
        'patientType': p.patient_type,
        'opdIpd': p.opd_ipd,
        'department': p.department,
        'doctorId': p.doctor_id,
        'reason': p.reason,
        'status': p.status,
        'registeredAt': p.registered_at.isoformat() if p.registered_at else None,
        'appointmentDate': p.appointment_date,
        'vitals': p.vitals or {},
        'prescription': p.prescription,
        'diagnosis': p.diagnosis,
        'pharmacyState': p.pharmacy_state,
        'history': p.history or [],
        'cost': float(p.cost or 0),
        'reports': p.reports or [],
    }


def format_vital(v: Vital) -> dict:
    return {
        'id': v.id,
        'patientId': v.patient_id,
        'bloodPressure': v.blood_pressure,
        'temperature': v.temperature,
        'pulse': v.pulse,
        'oxygenSaturation': v.oxygen_saturation,
        'weight': v.weight,
        'height': v.height,
        'recordedAt': v.recorded_at.isoformat() if v.recorded_at else None,
        'recordedBy': v.recorded_by,
    }


def next_token(hospital_id: int, department: str) -> int:
    """Queue number for the next visit in ``department``.

    Two registrations racing may receive the same number.
    """
    return Patient.objects.filter(hospital_id=hospital_id, department=department).count() + 1


def register_patient(hospital_id: int, data: dict) -> dict:
    s = PatientRegisterSerializer(data=data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    department = v['department']
    doctor_id = v.get('doctorId') or directory.first_available_doctor(department)
    p = Patient.objects.create(
        hospital_id=hospital_id,
        token=next_token(hospital_id, department),
        name=v['name'],
        age=v.get('age'),
        gender=v['gender'],
        phone=v['phone'],
        address=v['address'],
        blood_group=v['bloodGroup'],
        emergency_contact=v['emergencyContact'],
        emergency_phone=v['emergencyPhone'],
        insurance_id=v['insuranceId'],
        medical_history=v['medicalHistory'],
        allergies=v['allergies'],
        chronic_conditions=v['chronicConditions'],
        patient_type=v['patientType'],
        opd_ipd=v['opdIpd'],
        department=department,
        doctor_id=doctor_id,
        reason=v['reason'],
        prescription=v.get('prescription') or None,
        status=Patient.STATUS_WAITING,
        appointment_date=v['appointmentDate'],
        vitals=v['vitals'],
        history=v['history'],
        reports=v['reports'],
        cost=v['cost'],
    )
    payload = format_patient(p)
    logger.info("patient registered hospital=%s id=%s dept=%s token=%s", hospital_id, p.id, department, p.token)
    broadcast(hospital_id, 'patient-registered', payload, rooms=[DOCTORS, RECEPTION])
    broadcast(hospital_id, 'queue-updated', {'patient': payload})
    return payload


def move_patient(hospital_id: int, data: dict) -> dict:
    """Apply the non-empty fields of ``data`` (status, doctorId, pharmacyState)."""
    s = MovePatientSerializer(data=data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    p = Patient.objects.get(hospital_id=hospital_id, id=v['id'])
    fields = []
    if v.get('status'):
        p.status = v['status']
        fields.append('status')
    if v.get('doctorId'):
        p.doctor_id = v['doctorId']
        fields.append('doctor_id')
    if v.get('pharmacyState'):
        p.pharmacy_state = v['pharmacyState']
        fields.append('pharmacy_state')
    if fields:
        p.save(update_fields=fields)
    payload = format_patient(p)
    broadcast(hospital_id, 'patient-updated', payload)
    broadcast(hospital_id, 'queue-updated', {'patient': payload}, rooms=[DOCTORS, RECEPTION, PHARMACY])
    return payload


def mentions_lab_work(text: Optional[str]) -> bool:
    return bool(text) and _LAB_RE.search(text) is not None


def _start_of_today() -> datetime:
    return timezone.make_aware(datetime.combine(timezone.localdate(), time.min))


def update_prescription(hospital_id: int, data: dict) -> dict:
    """Save a prescription and order lab work when it asks for some.

    At most one automatic request per patient and day: nothing is created
    while a pending test ordered today exists.
    """
    s = UpdatePrescriptionSerializer(data=data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    p = Patient.objects.get(hospital_id=hospital_id, id=v['id'])
    p.prescription = v.get('prescription') or ''
    fields = ['prescription']
    if 'diagnosis' in v:
        p.diagnosis = v['diagnosis']
        fields.append('diagnosis')
    p.save(update_fields=fields)

    if mentions_lab_work(p.prescription):
        already = LabTest.objects.filter(
            hospital_id=hospital_id, patient=p,
            status=LabTest.STATUS_PENDING, ordered_at__gte=_start_of_today(),
        ).exists()
        if not already:
            test = lab.create_test(
                hospital_id, patient=p,
                test_name=lab.PRESCRIPTION_TEST_NAME,
                ordered_by=directory.doctor_name(p.doctor_id),
            )
            logger.info("lab request auto-created patient=%s test=%s", p.id, test.id)

    payload = format_patient(p)
    broadcast(hospital_id, 'prescription-updated', payload, rooms=[DOCTORS, RECEPTION])
    return payload


def list_patients(hospital_id: int, *, phone: Optional[str] = None, page: int = 1, limit: int = 50) -> dict:
    qs = Patient.objects.filter(hospital_id=hospital_id)
    if phone:
        qs = qs.filter(phone=phone)
    total = qs.count()
    offset = (page - 1) * limit
    items = [format_patient(p) for p in qs.order_by('-registered_at', '-id')[offset:offset + limit]]
    return {
        'patients': items,
        'pagination': {
            'total': total,
            'page': page,
            'totalPages': (total + limit - 1) // limit,
            'limit': limit,
        },
    }


def pharmacy_queue(hospital_id: int) -> list[dict]:
    qs = Patient.objects.filter(hospital_id=hospital_id).filter(
        (Q(prescription__isnull=False) & ~Q(prescription=''))
        | Q(status='pharmacy')
        | Q(pharmacy_state__isnull=False)
    )
    return [format_patient(p) for p in qs.order_by('token', 'id')]


def record_vitals(patient: Patient, data: dict, recorded_by: str = '') -> Vital:
    vital = Vital.objects.create(
        hospital_id=patient.hospital_id,
        patient=patient,
        blood_pressure=data.get('bloodPressure') or '',
        temperature=data.get('temperature'),
        pulse=data.get('pulse'),
        oxygen_saturation=data.get('oxygenSaturation'),
        weight=data.get('weight'),
        height=data.get('height'),
        recorded_by=recorded_by,
    )
    # keep the latest reading on the visit for the dashboards
    patient.vitals = {k: val for k, val in format_vital(vital).items()
                      if k not in ('id', 'patientId') and val not in (None, '')}
    patient.save(update_fields=['vitals'])
    return vital


def ensure_public_token(p: Patient) -> str:
    if not p.public_token:
        p.public_token = secrets.token_hex(32)
        p.save(update_fields=['public_token'])
    return p.public_token


def public_view(public_token: str) -> Optional[dict]:
    """Portal view of a prescription; None when the token is unknown."""
    if not public_token:
        return None
    p = Patient.objects.select_related('hospital').filter(public_token=public_token).first()
    if p is None:
        return None
    h = p.hospital
    return {
        'patient': {
            'name': p.name,
            'age': p.age,
            'gender': p.gender,
            'token': p.token,
            'department': p.department,
            'registeredAt': p.registered_at.isoformat() if p.registered_at else None,
            'prescription': p.prescription,
            'diagnosis': p.diagnosis,
            'vitals': p.vitals or {},
        },
        'hospital': {'name': h.name, 'address': h.address, 'phone': h.phone, 'email': h.email},
        'doctor': directory.get_doctor(p.doctor_id) if p.doctor_id else None,
    }
