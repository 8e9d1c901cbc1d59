from datetime import datetime, timedelta
from io import StringIO

import pytest
from django.contrib.auth import authenticate
from django.core.management import call_command
from django.utils import timezone

from core.models import Hospital, Patient, User
from core.services import credentials, hospitals

pytestmark = pytest.mark.django_db


def test_hospital_password_rotates_monthly(settings):
    settings.HOSPITAL_PASSWORD_SECRET = 'k'
    jan = timezone.make_aware(datetime(2026, 1, 15, 12, 0))
    feb = timezone.make_aware(datetime(2026, 2, 1, 12, 0))
    pw = credentials.hospital_password(1, jan)
    assert len(pw) == credentials.PASSWORD_LENGTH and pw == pw.upper()
    assert credentials.hospital_password(1, jan + timedelta(days=10)) == pw
    assert credentials.hospital_password(1, feb) != pw
    assert credentials.hospital_password(2, jan) != pw
    assert credentials.verify_hospital_password(1, f' {pw.lower()} ', jan)
    assert not credentials.verify_hospital_password(1, '', jan)


def test_superadmin_password_disabled_when_unset(settings):
    settings.SUPERADMIN_PASSWORD = ''
    assert not credentials.verify_superadmin_password('')
    assert not credentials.verify_superadmin_password('anything')
    settings.SUPERADMIN_PASSWORD = 's3cret'
    assert credentials.verify_superadmin_password('s3cret')


def test_backend_authenticates_within_hospital(hospital, other_hospital, make_user):
    make_user(hospital, 'sam', password='first123')
    make_user(other_hospital, 'sam', password='second123')
    assert authenticate(None, hospital=hospital, username='sam', password='first123').hospital_id == hospital.id
    assert authenticate(None, hospital=hospital, username='sam', password='second123') is None
    assert authenticate(None, hospital=other_hospital, username='sam', password='second123') is not None
    # without a hospital only platform accounts match
    assert authenticate(None, username='sam', password='first123') is None


def test_find_hospital_by_password(hospital, other_hospital):
    pw = credentials.hospital_password(other_hospital.id)
    assert hospitals.find_hospital_by_password(pw) == other_hospital
    assert hospitals.find_hospital_by_password('nope') is None


def test_superadmin_account_is_reused():
    first = hospitals.get_or_create_superadmin()
    second = hospitals.get_or_create_superadmin()
    assert first.pk == second.pk
    assert first.hospital_id is None
    assert first.role == User.ROLE_SUPERADMIN
    assert not first.has_usable_password()


def test_expire_subscriptions_command(hospital, other_hospital):
    hospital.subscription_expiry = timezone.now() - timedelta(days=1)
    hospital.save()
    other_hospital.subscription_expiry = timezone.now() + timedelta(days=1)
    other_hospital.save()
    out = StringIO()
    call_command('expire_subscriptions', stdout=out)
    assert 'Expired 1 hospital' in out.getvalue()
    hospital.refresh_from_db()
    other_hospital.refresh_from_db()
    assert hospital.subscription_status == Hospital.STATUS_EXPIRED
    assert other_hospital.subscription_status == Hospital.STATUS_ACTIVE


def test_seed_demo_is_idempotent():
    out = StringIO()
    call_command('seed_demo', stdout=out)
    call_command('seed_demo', stdout=out)
    h = Hospital.objects.get(email='demo@clinicdesk.local')
    assert credentials.hospital_password(h.id) in out.getvalue()
    assert User.objects.filter(hospital=h).count() == 5
    assert Patient.objects.filter(hospital=h).count() == 4
    assert authenticate(None, hospital=h, username='doctor', password='demo123') is not None
