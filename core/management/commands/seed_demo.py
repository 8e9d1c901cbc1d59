from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from core.models import Hospital, Inventory, LabInventory, LabTestType, User
from core.services.credentials import hospital_password
from core.services.patients import register_patient

STAFF = [
    ("admin", "admin"),
    ("reception", "reception"),
    ("doctor", "doctor"),
    ("pharmacy", "pharmacy"),
    ("lab", "lab"),
]

PATIENTS = [
    {"name": "Ravi Kumar", "age": 42, "gender": "Male", "phone": "9800000001", "department": "General", "reason": "Fever"},
    {"name": "Meena Iyer", "age": 35, "gender": "Female", "phone": "9800000002", "department": "Gynecology", "reason": "Routine check"},
    {"name": "Arjun Das", "age": 58, "gender": "Male", "phone": "9800000003", "department": "Cardiology", "reason": "Chest pain"},
    {"name": "Sara Thomas", "age": 27, "gender": "Female", "phone": "9800000004", "department": "Orthopedics", "reason": "Knee injury"},
]


class Command(BaseCommand):
    help = "Create a demo hospital with staff, patients and stock (idempotent). Password for every user: demo123"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="demo@clinicdesk.local")
        parser.add_argument("--name", default="Demo Clinic")

    @transaction.atomic
    def handle(self, *args, **opts):
        h, created = Hospital.objects.get_or_create(
            email=opts["email"],
            defaults={
                "name": opts["name"],
                "phone": "0000000000",
                "address": "1 Demo Street",
                "subscription_expiry": timezone.now() + timedelta(days=settings.TRIAL_DAYS),
            },
        )
        for username, role in STAFF:
            u, _ = User.objects.get_or_create(hospital=h, username=username, defaults={"role": role})
            u.password = make_password("demo123")
            u.role = role
            u.is_active = True
            u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))

        if created:
            for data in PATIENTS:
                p = register_patient(h.id, data)
                self.stdout.write(f"patient {p['name']} token={p['token']} dept={p['department']}")
            Inventory.objects.create(hospital=h, medication_name="Paracetamol 500mg", quantity=200, unit_price="1.50")
            Inventory.objects.create(hospital=h, medication_name="Amoxicillin 250mg", quantity=80, unit_price="4.00")
            LabInventory.objects.create(hospital=h, item_name="EDTA tubes", quantity=50, unit="pcs", min_level=20)
            LabTestType.objects.create(
                hospital=h, name="Complete Blood Count", category="Hematology", price="300.00", turnaround_time=6,
                parameters=[
                    {"name": "Hemoglobin", "unit": "g/dL", "referenceRange": "12-16"},
                    {"name": "WBC", "unit": "10^3/uL", "referenceRange": "4-11"},
                ],
            )

        self.stdout.write(self.style.SUCCESS(
            f"Hospital '{h.name}' id={h.id}; hospital password this month: {hospital_password(h.id)}"
        ))
