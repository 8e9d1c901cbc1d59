from collections.abc import Mapping

import bleach
from rest_framework import serializers

from core.services.directory import DEPARTMENTS


def _text(**kw):
    return serializers.CharField(required=False, allow_blank=True, default='', **kw)


class PatientRegisterSerializer(serializers.Serializer):
    """Payload of the ``register-patient`` socket event."""
    name = serializers.CharField(max_length=255, error_messages={
        'required': 'Patient name is required',
        'blank': 'Patient name is required',
        'null': 'Patient name is required',
    })
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = _text(max_length=20)
    phone = _text(max_length=32)
    address = _text()
    bloodGroup = _text(max_length=8)
    emergencyContact = _text(max_length=255)
    emergencyPhone = _text(max_length=32)
    insuranceId = _text(max_length=64)
    medicalHistory = _text()
    allergies = _text()
    chronicConditions = _text()
    patientType = serializers.CharField(required=False, default='New', max_length=20)
    opdIpd = serializers.CharField(required=False, default='OPD', max_length=8)
    department = serializers.CharField(required=False, default='General', max_length=64)
    doctorId = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None, max_length=20)
    reason = _text()
    prescription = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    appointmentDate = _text(max_length=32)
    vitals = serializers.DictField(required=False, default=dict)
    history = serializers.ListField(required=False, default=list)
    reports = serializers.ListField(required=False, default=list)
    cost = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, default=0)

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = data.copy()
            # dashboards send "" for untouched numeric inputs
            for key in ('age', 'cost'):
                if data.get(key) == '':
                    data.pop(key)
        return super().to_internal_value(data)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Patient name is required')
        return v

    def validate_department(self, v):
        return (v or '').strip() or 'General'


class MovePatientSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=32)
    doctorId = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=20)
    pharmacyState = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=32)


class UpdatePrescriptionSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    prescription = serializers.CharField(allow_blank=True, allow_null=True, required=False, default='')
    diagnosis = serializers.CharField(allow_blank=True, required=False)


class PatientListQuerySerializer(serializers.Serializer):
    phone = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=200, default=50)


class VitalSerializer(serializers.Serializer):
    bloodPressure = serializers.CharField(required=False, allow_blank=True, default='', max_length=16)
    temperature = serializers.FloatField(required=False, allow_null=True, default=None)
    pulse = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)
    oxygenSaturation = serializers.FloatField(required=False, allow_null=True, min_value=0, max_value=100, default=None)
    weight = serializers.FloatField(required=False, allow_null=True, min_value=0, default=None)
    height = serializers.FloatField(required=False, allow_null=True, min_value=0, default=None)


class ExportQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=['month', 'year'], required=False, default='month')


class DoctorQuerySerializer(serializers.Serializer):
    dept = serializers.ChoiceField(choices=DEPARTMENTS, required=False)
