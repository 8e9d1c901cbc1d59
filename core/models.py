"""
Database models for the clinic front desk.

Every record except :class:`Hospital` belongs to exactly one hospital
(tenant).  References between records are plain foreign keys; the only
cross-record invariant enforced by the database is that a username is
unique within its hospital.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class Hospital(models.Model):
    """A tenant.  Staff log in with the hospital's monthly password."""
    STATUS_ACTIVE = 'active'
    STATUS_SUSPENDED = 'suspended'
    STATUS_EXPIRED = 'expired'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_SUSPENDED, 'Suspended'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    subscription_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    subscription_expiry = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class HospitalUserManager(UserManager):
    """``UserManager`` without the global username lookup assumptions."""

    def get_by_natural_key(self, username):
        return self.get(hospital__isnull=True, username=username)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', 'superadmin')
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """Staff account scoped to a hospital.

    Roles map to the front-desk dashboards: reception registers visits,
    doctors write prescriptions, pharmacy dispenses and lab processes
    tests.  ``admin`` manages the hospital's own staff.  ``superadmin`` is
    the platform operator and is the only role without a hospital.
    """
    ROLE_ADMIN = 'admin'
    ROLE_RECEPTION = 'reception'
    ROLE_DOCTOR = 'doctor'
    ROLE_PHARMACY = 'pharmacy'
    ROLE_LAB = 'lab'
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_RECEPTION, 'Reception'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_PHARMACY, 'Pharmacy'),
        (ROLE_LAB, 'Lab'),
        (ROLE_SUPERADMIN, 'Super administrator'),
    ]

    # unique per hospital, see Meta.constraints
    username = models.CharField(max_length=150)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.CASCADE, related_name='users'
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_RECEPTION)

    objects = HospitalUserManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['hospital', 'username'], name='uniq_user_per_hospital'),
        ]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """A single visit, tracked through the department queues.

    ``token`` is the per-department queue number handed out at
    registration.  ``public_token`` is a random secret used by the patient
    portal and the QR code printed on prescriptions.
    """
    STATUS_WAITING = 'waiting'

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='patients')
    token = models.PositiveIntegerField(null=True, blank=True)
    public_token = models.CharField(max_length=64, blank=True, null=True, unique=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=32, blank=True, db_index=True)
    address = models.TextField(blank=True)
    blood_group = models.CharField(max_length=8, blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True)
    emergency_phone = models.CharField(max_length=32, blank=True)
    insurance_id = models.CharField(max_length=64, blank=True)
    medical_history = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    chronic_conditions = models.TextField(blank=True)
    patient_type = models.CharField(max_length=20, default='New')
    opd_ipd = models.CharField(max_length=8, default='OPD')
    department = models.CharField(max_length=64, default='General', db_index=True)
    doctor_id = models.CharField(max_length=20, blank=True, null=True)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=32, default=STATUS_WAITING, db_index=True)
    registered_at = models.DateTimeField(auto_now_add=True, db_index=True)
    appointment_date = models.CharField(max_length=32, blank=True)
    vitals = models.JSONField(default=dict, blank=True)
    prescription = models.TextField(blank=True, null=True)
    diagnosis = models.TextField(blank=True)
    pharmacy_state = models.CharField(max_length=32, blank=True, null=True)
    history = models.JSONField(default=list, blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    reports = models.JSONField(default=list, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'department'], name='core_patien_hospita_5b1f0e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.name} #{self.token} ({self.department})"


class Vital(models.Model):
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='vital_records')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='vital_records')
    blood_pressure = models.CharField(max_length=16, blank=True)
    temperature = models.FloatField(null=True, blank=True)
    pulse = models.PositiveIntegerField(null=True, blank=True)
    oxygen_saturation = models.FloatField(null=True, blank=True)
    weight = models.FloatField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True)
    recorded_at = models.DateTimeField(auto_now_add=True)
    recorded_by = models.CharField(max_length=150, blank=True)

    def __str__(self) -> str:
        return f"vitals p={self.patient_id} @ {self.recorded_at:%F %T}"


class LabTest(models.Model):
    """A requested diagnostic test.

    ``status`` and ``sample_status`` are free assignments from the lab
    dashboard; only the set of values is checked, not the order in which
    they are visited.
    """
    STATUS_PENDING = 'pending'
    STATUS_COLLECTION_PENDING = 'collection_pending'
    STATUS_PROCESSING = 'processing'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_COMPLETED = 'completed'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COLLECTION_PENDING, 'Collection pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    SAMPLE_CHOICES = [
        ('pending', 'Pending'),
        ('collected', 'Collected'),
        ('received', 'Received'),
        ('rejected', 'Rejected'),
    ]
    PRIORITY_CHOICES = [
        ('normal', 'Normal'),
        ('urgent', 'Urgent'),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='lab_tests')
    patient = models.ForeignKey(Patient, null=True, on_delete=models.CASCADE, related_name='lab_tests')
    test_name = models.CharField(max_length=255)
    test_type = models.CharField(max_length=64, blank=True)
    ordered_by = models.CharField(max_length=150, blank=True)
    ordered_at = models.DateTimeField(auto_now_add=True, db_index=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    result = models.TextField(blank=True)
    result_date = models.DateTimeField(null=True, blank=True)
    priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, default='normal', db_index=True)
    sample_status = models.CharField(max_length=16, choices=SAMPLE_CHOICES, default='pending', db_index=True)
    technician_id = models.CharField(max_length=20, blank=True, null=True)
    machine_id = models.CharField(max_length=64, blank=True, null=True)
    sample_collected_at = models.DateTimeField(null=True, blank=True)
    sample_collected_by = models.CharField(max_length=150, blank=True)
    rejection_reason = models.TextField(blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'status'], name='core_labtes_hospita_9c2d41_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.test_name} ({self.status})"


class LabResult(models.Model):
    test = models.ForeignKey(LabTest, on_delete=models.CASCADE, related_name='results')
    parameter_name = models.CharField(max_length=255)
    value = models.CharField(max_length=255, blank=True)
    unit = models.CharField(max_length=32, blank=True)
    reference_range = models.CharField(max_length=64, blank=True)
    is_abnormal = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    def __str__(self) -> str:
        return f"{self.parameter_name}={self.value}{self.unit}"


class Inventory(models.Model):
    """Pharmacy stock line (one batch of one medication)."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='inventory')
    medication_name = models.CharField(max_length=255)
    batch_number = models.CharField(max_length=64, blank=True)
    quantity = models.IntegerField(default=0)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    expiry_date = models.CharField(max_length=32, blank=True)
    manufacturer = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=64, blank=True)
    added_at = models.DateTimeField(auto_now_add=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'inventory'

    def __str__(self) -> str:
        return f"{self.medication_name} x{self.quantity}"


class Appointment(models.Model):
    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('checked_in', 'Checked in'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('no_show', 'No show'),
    ]

    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='appointments')
    patient = models.ForeignKey(Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments')
    patient_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    department = models.CharField(max_length=64, blank=True)
    doctor_id = models.CharField(max_length=20, blank=True, null=True)
    appointment_date = models.DateField()
    appointment_time = models.CharField(max_length=16, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='scheduled', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.patient_name} {self.appointment_date} {self.appointment_time}"


class LabInventory(models.Model):
    """Lab consumable stock.  ``status`` flips to ``low`` at ``min_level``."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='lab_inventory')
    item_name = models.CharField(max_length=255)
    batch_number = models.CharField(max_length=64, blank=True)
    quantity = models.IntegerField(default=0)
    unit = models.CharField(max_length=32, blank=True)
    expiry_date = models.CharField(max_length=32, blank=True)
    min_level = models.IntegerField(default=10)
    status = models.CharField(max_length=16, default='ok')
    added_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'lab inventory'

    def save(self, *args, **kwargs):
        self.status = 'low' if self.quantity <= self.min_level else 'ok'
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.item_name} x{self.quantity} ({self.status})"


class LabTestType(models.Model):
    """A per-hospital catalogue entry describing a test and its parameters."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='lab_test_types')
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=64, blank=True)
    parameters = models.JSONField(default=list, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    turnaround_time = models.PositiveIntegerField(null=True, blank=True, help_text="hours")

    def __str__(self) -> str:
        return self.name


class PrescriptionTemplate(models.Model):
    """Rendering options for the hospital's prescription PDF."""
    PAPER_SIZES = ['A4', 'LETTER', 'A5', 'LEGAL']

    hospital = models.OneToOneField(Hospital, on_delete=models.CASCADE, related_name='prescription_template')
    template_name = models.CharField(max_length=255, default='Default Template')
    hospital_name = models.CharField(max_length=255, blank=True)
    hospital_address = models.TextField(blank=True)
    hospital_phone = models.CharField(max_length=32, blank=True)
    hospital_email = models.EmailField(blank=True)
    hospital_logo = models.TextField(blank=True)
    doctor_name_position = models.CharField(max_length=16, default='top-left')
    header_text = models.TextField(blank=True)
    footer_text = models.TextField(blank=True)
    show_qr_code = models.BooleanField(default=True)
    show_watermark = models.BooleanField(default=False)
    watermark_text = models.CharField(max_length=64, blank=True)
    font_size = models.PositiveIntegerField(default=12)
    font_family = models.CharField(max_length=32, default='Helvetica')
    primary_color = models.CharField(max_length=7, default='#0EA5E9')
    secondary_color = models.CharField(max_length=7, default='#666666')
    paper_size = models.CharField(max_length=8, default='A4')
    margin_top = models.PositiveIntegerField(default=50)
    margin_bottom = models.PositiveIntegerField(default=50)
    margin_left = models.PositiveIntegerField(default=50)
    margin_right = models.PositiveIntegerField(default=50)
    show_letterhead = models.BooleanField(default=True)
    show_vitals = models.BooleanField(default=True)
    show_diagnosis = models.BooleanField(default=True)
    show_history = models.BooleanField(default=True)
    layout_style = models.CharField(max_length=16, default='classic')
    doctor_signature = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.template_name} (hospital={self.hospital_id})"
