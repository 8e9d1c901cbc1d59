from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from core.models import Hospital, User


class LoginSerializer(serializers.Serializer):
    hospitalPassword = serializers.CharField()
    username = serializers.CharField()
    userPassword = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v


class AdminLoginSerializer(serializers.Serializer):
    password = serializers.CharField()


def _check_password(v):
    try:
        validate_password(v)
    except DjangoValidationError as e:
        raise serializers.ValidationError(e.messages)
    return v


class HospitalInfoSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address = serializers.CharField(required=False, allow_blank=True)


class AdminAccountSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True)
    email = serializers.EmailField(required=False, allow_blank=True)

    def validate_password(self, v):
        return _check_password(v)


class HospitalRegisterSerializer(serializers.Serializer):
    hospital = HospitalInfoSerializer()
    admin = AdminAccountSerializer()


class StaffUserSerializer(serializers.Serializer):
    """New staff account inside the admin's own hospital."""
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=[r for r, _ in User.ROLE_CHOICES if r != User.ROLE_SUPERADMIN])

    def validate_username(self, v):
        v = v.strip()
        hospital = self.context['hospital']
        if User.objects.filter(hospital=hospital, username=v).exists():
            raise serializers.ValidationError('Username already exists in this hospital')
        return v

    def validate_password(self, v):
        return _check_password(v)


class HospitalStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s for s, _ in Hospital.STATUS_CHOICES])


class HospitalExpirySerializer(serializers.Serializer):
    expiryDate = serializers.DateTimeField(required=False)
    daysToAdd = serializers.IntegerField(required=False, min_value=1, max_value=3650)

    def validate(self, attrs):
        if 'expiryDate' not in attrs and 'daysToAdd' not in attrs:
            raise serializers.ValidationError('Either expiryDate or daysToAdd is required')
        return attrs
