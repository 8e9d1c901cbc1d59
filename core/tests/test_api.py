"""
Integration tests for registration, login and hospital administration.

These use Django REST Framework's APIClient within the APITestCase base
class, as the dashboards would call the API.

To run the tests:

```
pytest -q core/tests
```
"""

from datetime import timedelta

from django.db import IntegrityError, transaction
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient, APITestCase

from ..models import Hospital, User
from ..services.credentials import hospital_password


class HospitalAuthTests(APITestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        r = self.client.post(reverse('register_hospital'), {
            'hospital': {'name': 'Sunrise Clinic', 'email': 'sunrise@example.com', 'phone': '123'},
            'admin': {'username': 'boss', 'password': 'boss1234', 'email': 'boss@example.com'},
        }, format='json')
        self.assertEqual(r.status_code, 201)
        self.hospital = Hospital.objects.get(id=r.data['hospitalId'])
        self.hospital_password = r.data['hospitalPassword']

    def login(self, username='boss', password='boss1234', hospital_pw=None):
        return self.client.post(reverse('login_view'), {
            'hospitalPassword': hospital_pw or self.hospital_password,
            'username': username,
            'userPassword': password,
        }, format='json')

    def test_registration_starts_trial(self):
        self.assertEqual(self.hospital.subscription_status, Hospital.STATUS_ACTIVE)
        remaining = self.hospital.subscription_expiry - timezone.now()
        self.assertTrue(timedelta(days=29) < remaining <= timedelta(days=30))
        admin = User.objects.get(hospital=self.hospital, username='boss')
        self.assertEqual(admin.role, User.ROLE_ADMIN)
        self.assertEqual(self.hospital_password, hospital_password(self.hospital.id))

    def test_duplicate_hospital_email_rejected(self):
        r = self.client.post(reverse('register_hospital'), {
            'hospital': {'name': 'Copy', 'email': 'SUNRISE@example.com'},
            'admin': {'username': 'x', 'password': 'x1234567'},
        }, format='json')
        self.assertEqual(r.status_code, 400)
        self.assertFalse(r.data['ok'])

    def test_login_returns_tokens_and_stamps_last_login(self):
        r = self.login()
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data['token'])
        self.assertTrue(r.data['jwt_access'])
        self.assertTrue(r.data['jwt_refresh'])
        self.assertEqual(r.data['hospital']['id'], self.hospital.id)
        self.hospital.refresh_from_db()
        self.assertIsNotNone(self.hospital.last_login)

    def test_hospital_password_is_case_insensitive(self):
        r = self.login(hospital_pw=self.hospital_password.lower())
        self.assertEqual(r.status_code, 200)

    def test_login_failures(self):
        self.assertEqual(self.login(hospital_pw='WRONGWRONG').status_code, 401)
        self.assertEqual(self.login(password='nope').status_code, 401)
        self.hospital.subscription_status = Hospital.STATUS_SUSPENDED
        self.hospital.save()
        r = self.login()
        self.assertEqual(r.status_code, 403)

    def test_jwt_access_token_authenticates(self):
        access = self.login().data['jwt_access']
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        r = client.get(reverse('hospital_info'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['hospital']['name'], 'Sunrise Clinic')

    def test_auth_status_and_logout(self):
        token = self.login().data['token']
        r = self.client.get(reverse('auth_status'))
        self.assertFalse(r.data['authenticated'])
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        r = self.client.get(reverse('auth_status'))
        self.assertTrue(r.data['authenticated'])
        self.assertEqual(r.data['hospital']['id'], self.hospital.id)
        r = self.client.post(reverse('logout_view'), {}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertGreaterEqual(r.data['blacklisted'], 1)
        self.assertFalse(Token.objects.filter(key=token).exists())

    def test_admin_creates_staff_and_duplicate_username_is_rejected(self):
        token = self.login().data['token']
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        r = self.client.post(reverse('hospital_users'),
                             {'username': 'nurse', 'password': 'nurse123', 'role': 'reception'}, format='json')
        self.assertEqual(r.status_code, 201)
        r = self.client.post(reverse('hospital_users'),
                             {'username': 'nurse', 'password': 'other123', 'role': 'doctor'}, format='json')
        self.assertEqual(r.status_code, 400)
        self.assertEqual(User.objects.filter(hospital=self.hospital, username='nurse').count(), 1)
        r = self.client.get(reverse('hospital_users'))
        self.assertEqual(sorted(u['username'] for u in r.data), ['boss', 'nurse'])

    def test_same_username_allowed_in_another_hospital(self):
        other = Hospital.objects.create(name='Other', email='other@example.com')
        User.objects.create_user(username='boss', password='boss1234', hospital=other, role=User.ROLE_ADMIN)
        self.assertEqual(User.objects.filter(username='boss').count(), 2)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                User.objects.create_user(username='boss', password='x1234567', hospital=other)

    def test_staff_cannot_manage_users(self):
        User.objects.create_user(username='desk', password='desk1234', hospital=self.hospital)
        token = self.login('desk', 'desk1234').data['token']
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        r = self.client.post(reverse('hospital_users'),
                             {'username': 'x', 'password': 'x1234567', 'role': 'lab'}, format='json')
        self.assertEqual(r.status_code, 403)

    def test_public_hospital_list(self):
        r = self.client.get(reverse('list_hospitals'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, [{'id': self.hospital.id, 'name': 'Sunrise Clinic', 'email': 'sunrise@example.com'}])


@override_settings(SUPERADMIN_PASSWORD='platform-secret')
class SuperAdminTests(APITestCase):
    def setUp(self) -> None:
        self.hospital = Hospital.objects.create(
            name='North Clinic', email='north@example.com',
            subscription_expiry=timezone.now() + timedelta(days=5),
        )
        User.objects.create_user(username='doc', password='doc12345', hospital=self.hospital, role=User.ROLE_DOCTOR)
        r = self.client.post(reverse('admin_login'), {'password': 'platform-secret'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['role'], User.ROLE_SUPERADMIN)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")

    def test_wrong_password(self):
        r = APIClient().post(reverse('admin_login'), {'password': 'guess'}, format='json')
        self.assertEqual(r.status_code, 401)

    def test_lists_hospitals_with_current_password(self):
        r = self.client.get(reverse('admin_hospitals'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data[0]['currentPassword'], hospital_password(self.hospital.id))
        r = self.client.get(reverse('admin_users'))
        self.assertEqual([u['username'] for u in r.data], ['doc'])
        self.assertEqual(r.data[0]['hospitalName'], 'North Clinic')

    def test_hospital_password_endpoint(self):
        r = self.client.get(reverse('admin_hospital_password', args=[self.hospital.id]))
        self.assertEqual(r.data['password'], hospital_password(self.hospital.id))
        r = self.client.get(reverse('admin_hospital_password', args=[9999]))
        self.assertEqual(r.status_code, 404)

    def test_status_and_expiry(self):
        url = reverse('admin_hospital_status', args=[self.hospital.id])
        r = self.client.put(url, {'status': 'suspended'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['hospital']['subscriptionStatus'], 'suspended')
        self.assertEqual(self.client.put(url, {'status': 'bogus'}, format='json').status_code, 400)

        url = reverse('admin_hospital_expiry', args=[self.hospital.id])
        self.assertEqual(self.client.put(url, {}, format='json').status_code, 400)
        before = Hospital.objects.get(id=self.hospital.id).subscription_expiry
        r = self.client.put(url, {'daysToAdd': 30}, format='json')
        self.assertEqual(r.status_code, 200)
        h = Hospital.objects.get(id=self.hospital.id)
        self.assertEqual(h.subscription_status, Hospital.STATUS_ACTIVE)
        self.assertEqual(h.subscription_expiry - before, timedelta(days=30))

        r = self.client.put(url, {'expiryDate': '2030-01-31T00:00:00Z'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(Hospital.objects.get(id=self.hospital.id).subscription_expiry.year, 2030)

    def test_hospital_staff_cannot_use_admin_endpoints(self):
        doc = User.objects.get(username='doc')
        token = Token.objects.create(user=doc)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')
        self.assertEqual(client.get(reverse('admin_hospitals')).status_code, 403)
