"""
Pharmacy stock and appointments.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import transaction
from django.db.models import F

from core.models import Appointment, Inventory, Patient

logger = logging.getLogger(__name__)


def format_item(i: Inventory) -> dict:
    return {
        'id': i.id,
        'medicationName': i.medication_name,
        'batchNumber': i.batch_number,
        'quantity': i.quantity,
        'unitPrice': float(i.unit_price or 0),
        'expiryDate': i.expiry_date,
        'manufacturer': i.manufacturer,
        'category': i.category,
        'addedAt': i.added_at.isoformat() if i.added_at else None,
        'lastUpdated': i.last_updated.isoformat() if i.last_updated else None,
    }


def add_item(hospital_id: int, v: dict) -> Inventory:
    return Inventory.objects.create(
        hospital_id=hospital_id,
        medication_name=v['medicationName'],
        batch_number=v['batchNumber'],
        quantity=v['quantity'],
        unit_price=v['unitPrice'],
        expiry_date=v['expiryDate'],
        manufacturer=v['manufacturer'],
        category=v['category'],
    )


def adjust_stock(item: Inventory, delta: int) -> Inventory:
    """Add ``delta`` (negative to dispense).  Stock never goes below zero."""
    with transaction.atomic():
        item = Inventory.objects.select_for_update().get(pk=item.pk)
        if item.quantity + delta < 0:
            raise ValueError('Insufficient stock')
        item.quantity = F('quantity') + delta
        item.save(update_fields=['quantity', 'last_updated'])
        item.refresh_from_db()
    logger.info("stock %s %+d -> %d", item.medication_name, delta, item.quantity)
    return item


def format_appointment(a: Appointment) -> dict:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'patientName': a.patient_name,
        'phone': a.phone,
        'department': a.department,
        'doctorId': a.doctor_id,
        'appointmentDate': a.appointment_date.isoformat() if a.appointment_date else None,
        'appointmentTime': a.appointment_time,
        'status': a.status,
        'notes': a.notes,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
    }


def book_appointment(hospital_id: int, v: dict) -> Appointment:
    """Raises Patient.DoesNotExist for an unknown ``patientId``."""
    patient = None
    if v.get('patientId'):
        patient = Patient.objects.get(hospital_id=hospital_id, id=v['patientId'])
    return Appointment.objects.create(
        hospital_id=hospital_id,
        patient=patient,
        patient_name=v.get('patientName') or patient.name,
        phone=v.get('phone') or (patient.phone if patient else ''),
        department=v.get('department') or (patient.department if patient else ''),
        doctor_id=v.get('doctorId') or None,
        appointment_date=v['appointmentDate'],
        appointment_time=v['appointmentTime'],
        notes=v['notes'],
    )


def list_appointments(hospital_id: int, *, on_date: Optional[date] = None, status: Optional[str] = None) -> list[dict]:
    qs = Appointment.objects.filter(hospital_id=hospital_id)
    if on_date:
        qs = qs.filter(appointment_date=on_date)
    if status:
        qs = qs.filter(status=status)
    return [format_appointment(a) for a in qs.order_by('appointment_date', 'appointment_time', 'id')]
