"""
Django admin registrations for the core models.

Platform operators can inspect tenants and their records at ``/admin/``.
Sign in there with an account created by ``createsuperuser``; those
accounts belong to no hospital.
"""

from django.contrib import admin

from .models import (
    Appointment,
    Hospital,
    Inventory,
    LabInventory,
    LabResult,
    LabTest,
    LabTestType,
    Patient,
    PrescriptionTemplate,
    User,
    Vital,
)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'subscription_status', 'subscription_expiry', 'last_login')
    list_filter = ('subscription_status',)
    search_fields = ('name', 'email')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'hospital', 'role', 'is_active', 'last_login')
    list_filter = ('role', 'hospital')
    search_fields = ('username', 'email')
    exclude = ('password',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'token', 'name', 'department', 'status', 'registered_at')
    list_filter = ('hospital', 'department', 'status')
    search_fields = ('name', 'phone')
    exclude = ('public_token',)


@admin.register(Vital)
class VitalAdmin(admin.ModelAdmin):
    list_display = ('patient', 'blood_pressure', 'pulse', 'temperature', 'recorded_at')


class LabResultInline(admin.TabularInline):
    model = LabResult
    extra = 0


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'patient', 'test_name', 'status', 'sample_status', 'priority', 'ordered_at')
    list_filter = ('hospital', 'status', 'sample_status', 'priority')
    search_fields = ('test_name', 'patient__name')
    inlines = [LabResultInline]


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ('medication_name', 'hospital', 'batch_number', 'quantity', 'expiry_date')
    list_filter = ('hospital', 'category')
    search_fields = ('medication_name', 'batch_number')


@admin.register(LabInventory)
class LabInventoryAdmin(admin.ModelAdmin):
    list_display = ('item_name', 'hospital', 'quantity', 'min_level', 'status')
    list_filter = ('hospital', 'status')


@admin.register(LabTestType)
class LabTestTypeAdmin(admin.ModelAdmin):
    list_display = ('name', 'hospital', 'category', 'price', 'turnaround_time')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'hospital', 'appointment_date', 'appointment_time', 'status')
    list_filter = ('hospital', 'status')


@admin.register(PrescriptionTemplate)
class PrescriptionTemplateAdmin(admin.ModelAdmin):
    list_display = ('hospital', 'template_name', 'paper_size', 'updated_at')
