"""
URL mappings for the clinic API.

Paths mirror the ones the dashboards call.  Trailing slashes are
deliberately omitted.
"""
from django.urls import include, path

from .auth_views import admin_login_view, auth_status, jwt_refresh_view, login_view, logout_view
from .views import directory, health, inventory, lab, patients, prescriptions
from .views.hospitals import hospital_info, hospital_users, list_hospitals, register_hospital
from .views.superadmin import (
    admin_hospital_expiry,
    admin_hospital_password,
    admin_hospital_status,
    admin_hospitals,
    admin_users,
)

urlpatterns = [
    path('healthz', health.healthz),
    path('', include('django_prometheus.urls')),  # /metrics

    # Auth
    path('api/login', login_view, name='login_view'),
    path('api/logout', logout_view, name='logout_view'),
    path('api/auth/status', auth_status, name='auth_status'),
    path('api/token/refresh', jwt_refresh_view, name='jwt_refresh'),

    # Hospitals
    path('api/hospitals/register', register_hospital, name='register_hospital'),
    path('api/hospitals', list_hospitals, name='list_hospitals'),
    path('api/hospital/info', hospital_info, name='hospital_info'),
    path('api/hospital/users', hospital_users, name='hospital_users'),

    # Super admin
    path('api/admin/login', admin_login_view, name='admin_login'),
    path('api/admin/hospitals', admin_hospitals, name='admin_hospitals'),
    path('api/admin/users', admin_users, name='admin_users'),
    path('api/admin/hospital-password/<int:pk>', admin_hospital_password, name='admin_hospital_password'),
    path('api/admin/hospitals/<int:pk>/status', admin_hospital_status, name='admin_hospital_status'),
    path('api/admin/hospitals/<int:pk>/expiry', admin_hospital_expiry, name='admin_hospital_expiry'),

    # Patients & directory
    path('api/patients', patients.list_patients, name='list_patients'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<int:pk>/vitals', patients.patient_vitals, name='patient_vitals'),
    path('api/prescriptions', patients.prescriptions, name='prescriptions'),
    path('api/export', patients.export_patients, name='export_patients'),
    path('api/public/prescription/<str:token>', patients.public_prescription, name='public_prescription'),
    path('api/doctors', directory.doctors, name='doctors'),
    path('api/departments', directory.departments, name='departments'),

    # Prescription template & PDF
    path('api/prescription-template', prescriptions.prescription_template, name='prescription_template'),
    path('api/prescription-pdf/<int:pk>', prescriptions.prescription_pdf, name='prescription_pdf'),

    # Lab
    path('api/lab/stats', lab.lab_stats, name='lab_stats'),
    path('api/lab/tests', lab.lab_tests, name='lab_tests'),
    path('api/lab/tests/<int:pk>', lab.lab_test_detail, name='lab_test_detail'),
    path('api/lab/tests/<int:pk>/assign', lab.lab_test_assign, name='lab_test_assign'),
    path('api/lab/tests/<int:pk>/sample', lab.lab_test_sample, name='lab_test_sample'),
    path('api/lab/tests/<int:pk>/process', lab.lab_test_process, name='lab_test_process'),
    path('api/lab/tests/<int:pk>/status', lab.lab_test_status, name='lab_test_status'),
    path('api/lab/tests/<int:pk>/results', lab.lab_test_results, name='lab_test_results'),
    path('api/lab/inventory', lab.lab_inventory, name='lab_inventory'),
    path('api/lab/settings/test-types', lab.lab_test_types, name='lab_test_types'),

    # Pharmacy inventory & appointments
    path('api/inventory', inventory.inventory_list, name='inventory_list'),
    path('api/inventory/<int:pk>/adjust', inventory.inventory_adjust, name='inventory_adjust'),
    path('api/appointments', inventory.appointments, name='appointments'),
    path('api/appointments/<int:pk>/status', inventory.appointment_status, name='appointment_status'),
]
