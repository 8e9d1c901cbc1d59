from rest_framework import serializers

from core.models import Appointment


class InventorySerializer(serializers.Serializer):
    medicationName = serializers.CharField(max_length=255)
    batchNumber = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)
    quantity = serializers.IntegerField(min_value=0, default=0)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    expiryDate = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)
    manufacturer = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)


class StockAdjustSerializer(serializers.Serializer):
    delta = serializers.IntegerField()

    def validate_delta(self, v):
        if v == 0:
            raise serializers.ValidationError('delta must not be zero')
        return v


class AppointmentSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False, allow_null=True)
    patientName = serializers.CharField(max_length=255, required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)
    department = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)
    doctorId = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None, max_length=20)
    appointmentDate = serializers.DateField()
    appointmentTime = serializers.CharField(required=False, allow_blank=True, default='', max_length=16)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if not attrs.get('patientId') and not attrs.get('patientName'):
            raise serializers.ValidationError('patientId or patientName is required')
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s for s, _ in Appointment.STATUS_CHOICES])


class AppointmentQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=[s for s, _ in Appointment.STATUS_CHOICES], required=False)
