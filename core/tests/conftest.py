import pytest
from django.core.cache import cache
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from core.models import Hospital, User
from core.services.credentials import hospital_password


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(name='City Clinic', email='city@example.com')


@pytest.fixture
def other_hospital(db):
    return Hospital.objects.create(name='Lake Clinic', email='lake@example.com')


@pytest.fixture
def make_user(db):
    def _make(hospital, username='staff', role=User.ROLE_RECEPTION, password='secret123'):
        return User.objects.create_user(username=username, password=password, hospital=hospital, role=role)
    return _make


@pytest.fixture
def auth_client():
    def _client(user):
        client = APIClient()
        token, _ = Token.objects.get_or_create(user=user)
        client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
        return client
    return _client


@pytest.fixture
def staff(hospital, make_user):
    return make_user(hospital, 'reception1', User.ROLE_RECEPTION)


@pytest.fixture
def staff_client(staff, auth_client):
    return auth_client(staff)


@pytest.fixture
def admin_client(hospital, make_user, auth_client):
    return auth_client(make_user(hospital, 'admin1', User.ROLE_ADMIN))


@pytest.fixture
def monthly_password(hospital):
    return hospital_password(hospital.id)
