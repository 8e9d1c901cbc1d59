"""
Static department and doctor directory.

The front desk works from a fixed list of departments and on-duty
doctors; it is not stored in the database.
"""
from typing import Optional

DEPARTMENTS = [
    'General',
    'Orthopedics',
    'Gynecology',
    'Pediatrics',
    'ENT',
    'Dermatology',
    'Cardiology',
    'Medicine',
]

DOCTORS = [
    {'id': '1', 'name': 'Dr. Asha Patel', 'department': 'General', 'status': 'available'},
    {'id': '2', 'name': 'Dr. Rajesh Singh', 'department': 'Orthopedics', 'status': 'available'},
    {'id': '3', 'name': 'Dr. Nisha Rao', 'department': 'Gynecology', 'status': 'available'},
    {'id': '4', 'name': 'Dr. Vikram Shah', 'department': 'Cardiology', 'status': 'available'},
]


def list_doctors(department: Optional[str] = None) -> list[dict]:
    if department:
        return [dict(d) for d in DOCTORS if d['department'] == department]
    return [dict(d) for d in DOCTORS]


def get_doctor(doctor_id) -> Optional[dict]:
    for d in DOCTORS:
        if d['id'] == str(doctor_id):
            return dict(d)
    return None


def first_available_doctor(department: str) -> Optional[str]:
    """Return the id of the first available doctor in ``department``."""
    for d in DOCTORS:
        if d['department'] == department and d['status'] == 'available':
            return d['id']
    return None


def doctor_name(doctor_id, default: str = 'Doctor') -> str:
    d = get_doctor(doctor_id) if doctor_id else None
    return d['name'] if d else default
