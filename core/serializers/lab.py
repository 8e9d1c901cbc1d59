from rest_framework import serializers

from core.models import LabTest

TEST_STATUSES = [c[0] for c in LabTest.STATUS_CHOICES]
SAMPLE_STATUSES = [c[0] for c in LabTest.SAMPLE_CHOICES]


class LabTestQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)

    def validate_status(self, v):
        if v and v != 'all' and v not in TEST_STATUSES:
            raise serializers.ValidationError('Unknown status')
        return v


class AssignSerializer(serializers.Serializer):
    technicianId = serializers.CharField(max_length=20, allow_null=True, allow_blank=True)


class SampleSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SAMPLE_STATUSES)
    rejectionReason = serializers.CharField(required=False, allow_blank=True, default='')


class ProcessSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TEST_STATUSES)
    machineId = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=64)


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TEST_STATUSES)
    rejectionReason = serializers.CharField(required=False, allow_blank=True, default='')


class ResultItemSerializer(serializers.Serializer):
    parameterName = serializers.CharField(max_length=255)
    value = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    unit = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)
    referenceRange = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)
    isAbnormal = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        # numeric values arrive as numbers from the result form
        if isinstance(data, dict) and isinstance(data.get('value'), (int, float)):
            data = {**data, 'value': str(data['value'])}
        return super().to_internal_value(data)


class ResultsSerializer(serializers.Serializer):
    results = ResultItemSerializer(many=True, error_messages={'required': 'Invalid results data'})


class LabRequestSerializer(serializers.Serializer):
    """Payload of the ``create-lab-request`` socket event."""
    patientId = serializers.IntegerField()
    testName = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    doctorId = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    priority = serializers.ChoiceField(choices=[c[0] for c in LabTest.PRIORITY_CHOICES], required=False, default='normal')


class LabInventorySerializer(serializers.Serializer):
    itemName = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=0, default=0)
    unit = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)
    minLevel = serializers.IntegerField(required=False, min_value=0, default=10)
    batchNumber = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)
    expiryDate = serializers.CharField(required=False, allow_blank=True, default='', max_length=32)


class LabTestTypeSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, default='', max_length=64)
    parameters = serializers.ListField(required=False, default=list)
    price = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, default=0)
    turnaroundTime = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)
