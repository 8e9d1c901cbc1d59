import io

import pandas as pd
import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from core.models import LabTest, Patient, PrescriptionTemplate, User
from core.services import patients as patient_service

pytestmark = pytest.mark.django_db


def test_token_increments_per_department(hospital):
    first = patient_service.register_patient(hospital.id, {'name': 'A', 'department': 'ENT'})
    second = patient_service.register_patient(hospital.id, {'name': 'B', 'department': 'ENT'})
    other = patient_service.register_patient(hospital.id, {'name': 'C', 'department': 'Cardiology'})
    assert first['token'] == 1
    assert second['token'] == first['token'] + 1
    assert other['token'] == 1


def test_token_counter_is_per_hospital(hospital, other_hospital):
    patient_service.register_patient(hospital.id, {'name': 'A'})
    p = patient_service.register_patient(other_hospital.id, {'name': 'B'})
    assert p['token'] == 1
    assert p['department'] == 'General'


def test_registration_assigns_first_available_doctor(hospital):
    p = patient_service.register_patient(hospital.id, {'name': 'Knee', 'department': 'Orthopedics'})
    assert p['doctorId'] == '2'
    assert p['status'] == 'waiting'
    p = patient_service.register_patient(hospital.id, {'name': 'Skin', 'department': 'Dermatology'})
    assert p['doctorId'] is None
    p = patient_service.register_patient(hospital.id, {'name': 'Chosen', 'department': 'General', 'doctorId': '4'})
    assert p['doctorId'] == '4'


def test_registration_requires_name(hospital):
    from rest_framework.exceptions import ValidationError
    with pytest.raises(ValidationError):
        patient_service.register_patient(hospital.id, {'name': '  '})
    assert not Patient.objects.exists()


def test_registration_coerces_form_values(hospital):
    p = patient_service.register_patient(hospital.id, {'name': '<b>Ravi</b>', 'age': '41', 'cost': ''})
    assert p['name'] == 'Ravi'
    assert p['age'] == 41
    assert p['cost'] == 0


def test_prescription_with_lab_keyword_creates_one_test_per_day(hospital):
    p = patient_service.register_patient(hospital.id, {'name': 'Lab', 'department': 'General'})
    patient_service.update_prescription(hospital.id, {'id': p['id'], 'prescription': 'Paracetamol\nCBC panel'})
    patient_service.update_prescription(hospital.id, {'id': p['id'], 'prescription': 'Repeat blood work'})
    tests = LabTest.objects.filter(patient_id=p['id'])
    assert tests.count() == 1
    t = tests.get()
    assert t.status == LabTest.STATUS_PENDING
    assert t.ordered_by == 'Dr. Asha Patel'
    assert t.hospital_id == hospital.id


def test_prescription_without_keyword_creates_nothing(hospital):
    p = patient_service.register_patient(hospital.id, {'name': 'Rest'})
    out = patient_service.update_prescription(hospital.id, {'id': p['id'], 'prescription': 'Rest and fluids'})
    assert out['prescription'] == 'Rest and fluids'
    assert not LabTest.objects.exists()


def test_move_patient_updates_only_given_fields(hospital):
    p = patient_service.register_patient(hospital.id, {'name': 'Move'})
    out = patient_service.move_patient(hospital.id, {'id': p['id'], 'status': 'pharmacy'})
    assert out['status'] == 'pharmacy'
    assert out['doctorId'] == p['doctorId']
    out = patient_service.move_patient(hospital.id, {'id': p['id'], 'pharmacyState': 'dispensed'})
    assert out['status'] == 'pharmacy'
    assert out['pharmacyState'] == 'dispensed'

    # empty values leave the record alone
    out = patient_service.move_patient(hospital.id, {'id': p['id'], 'status': '', 'doctorId': None, 'pharmacyState': ''})
    assert (out['status'], out['doctorId'], out['pharmacyState']) == ('pharmacy', p['doctorId'], 'dispensed')


def test_register_patient_keeps_prescription(hospital):
    p = patient_service.register_patient(hospital.id, {'name': 'Walk-in', 'prescription': 'Paracetamol 500mg'})
    assert p['prescription'] == 'Paracetamol 500mg'
    assert Patient.objects.get(id=p['id']).prescription == 'Paracetamol 500mg'


def test_move_patient_of_other_hospital_not_found(hospital, other_hospital):
    p = patient_service.register_patient(other_hospital.id, {'name': 'Elsewhere'})
    with pytest.raises(Patient.DoesNotExist):
        patient_service.move_patient(hospital.id, {'id': p['id'], 'status': 'done'})


def test_list_patients_paginates_newest_first(hospital, staff_client):
    for i in range(3):
        patient_service.register_patient(hospital.id, {'name': f'P{i}', 'phone': f'99{i}'})
    r = staff_client.get(reverse('list_patients'), {'limit': 2})
    assert r.status_code == 200
    assert [p['name'] for p in r.data['patients']] == ['P2', 'P1']
    assert r.data['pagination'] == {'total': 3, 'page': 1, 'totalPages': 2, 'limit': 2}
    r = staff_client.get(reverse('list_patients'), {'phone': '991'})
    assert [p['name'] for p in r.data['patients']] == ['P1']
    # phone must match exactly
    r = staff_client.get(reverse('list_patients'), {'phone': '99'})
    assert r.data['patients'] == []


def test_patient_detail_is_tenant_scoped(hospital, other_hospital, staff_client):
    mine = patient_service.register_patient(hospital.id, {'name': 'Mine'})
    theirs = patient_service.register_patient(other_hospital.id, {'name': 'Theirs'})
    assert staff_client.get(reverse('patient_detail', args=[mine['id']])).status_code == 200
    r = staff_client.get(reverse('patient_detail', args=[theirs['id']]))
    assert r.status_code == 404


def test_requires_authentication(hospital):
    assert APIClient().get(reverse('list_patients')).status_code == 401


def test_inactive_subscription_blocks_api(hospital, staff_client):
    hospital.subscription_status = 'expired'
    hospital.save()
    r = staff_client.get(reverse('list_patients'))
    assert r.status_code == 403


def test_vitals_are_recorded_and_copied_to_visit(hospital, staff_client):
    p = patient_service.register_patient(hospital.id, {'name': 'Vitals'})
    url = reverse('patient_vitals', args=[p['id']])
    r = staff_client.post(url, {'bloodPressure': '120/80', 'pulse': 72, 'temperature': 98.6}, format='json')
    assert r.status_code == 201
    assert r.data['vital']['recordedBy'] == 'reception1'
    r = staff_client.get(url)
    assert len(r.data) == 1
    visit = Patient.objects.get(id=p['id'])
    assert visit.vitals['bloodPressure'] == '120/80'
    assert visit.vitals['pulse'] == 72


def test_pharmacy_queue(hospital, staff_client):
    a = patient_service.register_patient(hospital.id, {'name': 'A'})
    patient_service.register_patient(hospital.id, {'name': 'B'})
    c = patient_service.register_patient(hospital.id, {'name': 'C'})
    patient_service.update_prescription(hospital.id, {'id': a['id'], 'prescription': 'Paracetamol'})
    patient_service.move_patient(hospital.id, {'id': c['id'], 'status': 'pharmacy'})
    r = staff_client.get(reverse('prescriptions'))
    assert [p['name'] for p in r.data] == ['A', 'C']


def test_directory(staff_client):
    r = staff_client.get(reverse('doctors'), {'dept': 'Cardiology'})
    assert [d['name'] for d in r.data] == ['Dr. Vikram Shah']
    r = staff_client.get(reverse('departments'))
    assert 'Pediatrics' in r.data


def test_export_is_scoped_to_hospital(hospital, other_hospital, staff_client):
    patient_service.register_patient(hospital.id, {'name': 'Here', 'cost': '250.00'})
    patient_service.register_patient(other_hospital.id, {'name': 'Not here'})
    r = staff_client.get(reverse('export_patients'), {'type': 'year'})
    assert r.status_code == 200
    assert r['Content-Type'].startswith('application/vnd.openxmlformats')
    df = pd.read_excel(io.BytesIO(r.content), engine='openpyxl')
    assert list(df.columns)[:3] == ['Patient Name', 'Visit Date', 'Phone']
    assert df['Patient Name'].tolist() == ['Here']
    assert df['Cost Paid'].tolist() == [250.0]


def test_prescription_template_defaults_and_upsert(hospital, staff_client, admin_client):
    r = staff_client.get(reverse('prescription_template'))
    assert r.status_code == 200
    assert r.data['paperSize'] == 'A4'
    assert r.data['showQRCode'] is True
    assert r.data['primaryColor'] == '#0EA5E9'

    url = reverse('prescription_template')
    assert staff_client.post(url, {'fontSize': 14}, format='json').status_code == 403
    r = admin_client.post(url, {'fontSize': 14, 'paperSize': 'letter', 'footerText': 'Get well soon'}, format='json')
    assert r.status_code == 200
    tpl = PrescriptionTemplate.objects.get(hospital=hospital)
    assert (tpl.font_size, tpl.paper_size, tpl.footer_text) == (14, 'LETTER', 'Get well soon')

    # settings page may also submit a plain form
    r = admin_client.post(url, {'paperSize': 'a5', 'headerText': 'Hello'})
    assert r.status_code == 200
    tpl.refresh_from_db()
    assert (tpl.font_size, tpl.paper_size, tpl.header_text) == (14, 'A5', 'Hello')

    r = admin_client.post(url, {'primaryColor': 'blue'}, format='json')
    assert r.status_code == 400
    r = admin_client.post(url, {'paperSize': 'B5'}, format='json')
    assert r.status_code == 400


def test_prescription_pdf_and_public_portal(hospital, staff_client):
    p = patient_service.register_patient(hospital.id, {'name': 'Print Me', 'department': 'General', 'reason': 'Cough'})
    patient_service.update_prescription(hospital.id, {'id': p['id'], 'prescription': 'Syrup 5ml\nSteam'})
    PrescriptionTemplate.objects.create(hospital=hospital, show_watermark=True, watermark_text='COPY')

    r = staff_client.get(reverse('prescription_pdf', args=[p['id']]))
    assert r.status_code == 200
    assert r['Content-Type'] == 'application/pdf'
    assert r.content.startswith(b'%PDF')

    token = Patient.objects.get(id=p['id']).public_token
    assert token and len(token) == 64

    anon = APIClient()
    assert anon.get(reverse('prescription_pdf', args=[p['id']])).status_code == 401
    assert anon.get(reverse('prescription_pdf', args=[p['id']]), {'token': 'bad'}).status_code == 404
    r = anon.get(reverse('prescription_pdf', args=[p['id']]), {'token': token})
    assert r.content.startswith(b'%PDF')

    r = anon.get(reverse('public_prescription', args=[token]))
    assert r.status_code == 200
    assert r.data['patient']['prescription'] == 'Syrup 5ml\nSteam'
    assert r.data['hospital']['name'] == 'City Clinic'
    assert r.data['doctor']['name'] == 'Dr. Asha Patel'
    assert anon.get(reverse('public_prescription', args=['missing'])).status_code == 404


def test_unknown_paper_size_falls_back_to_a4():
    from reportlab.lib.pagesizes import A4, LEGAL
    from core.services.documents import paper_size
    assert paper_size('legal') == LEGAL
    assert paper_size('B5') == A4
    assert paper_size(None) == A4


def test_inventory_and_appointments(hospital, staff_client):
    r = staff_client.post(reverse('inventory_list'), {'medicationName': 'Cetirizine', 'quantity': 5}, format='json')
    assert r.status_code == 201
    item_id = r.data['item']['id']
    url = reverse('inventory_adjust', args=[item_id])
    r = staff_client.post(url, {'delta': -3}, format='json')
    assert r.data['item']['quantity'] == 2
    r = staff_client.post(url, {'delta': -5}, format='json')
    assert r.status_code == 400
    assert staff_client.get(reverse('inventory_list')).data[0]['quantity'] == 2

    p = patient_service.register_patient(hospital.id, {'name': 'Booked', 'phone': '555'})
    r = staff_client.post(reverse('appointments'),
                          {'patientId': p['id'], 'appointmentDate': '2030-05-01', 'appointmentTime': '10:30'},
                          format='json')
    assert r.status_code == 201
    assert r.data['appointment']['patientName'] == 'Booked'
    assert r.data['appointment']['phone'] == '555'
    appt_id = r.data['appointment']['id']
    r = staff_client.post(reverse('appointment_status', args=[appt_id]), {'status': 'checked_in'}, format='json')
    assert r.data['appointment']['status'] == 'checked_in'
    r = staff_client.get(reverse('appointments'), {'date': '2030-05-01'})
    assert len(r.data) == 1
    r = staff_client.post(reverse('appointments'), {'appointmentDate': '2030-05-01'}, format='json')
    assert r.status_code == 400


def test_staff_user_role_cannot_be_superadmin(hospital, admin_client):
    r = admin_client.post(reverse('hospital_users'),
                          {'username': 'root', 'password': 'root1234', 'role': User.ROLE_SUPERADMIN}, format='json')
    assert r.status_code == 400
