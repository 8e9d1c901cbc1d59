"""
Hospital and platform credentials.

Each hospital shares one password among its staff.  It is not stored:
it is derived from the hospital id and the current month, so it rotates
on the first of every month without any job having to run::

    HMAC-SHA256(HOSPITAL_PASSWORD_SECRET, "<hospital_id>:<YYYY-MM>")

The first ten hex digits, upper-cased, are what staff type in.
"""
from __future__ import annotations

import hashlib
import hmac
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

PASSWORD_LENGTH = 10


def current_period(when: Optional[datetime] = None) -> str:
    when = timezone.localtime(when) if when else timezone.localtime()
    return when.strftime('%Y-%m')


def hospital_password(hospital_id: int, when: Optional[datetime] = None) -> str:
    message = f"{hospital_id}:{current_period(when)}".encode()
    digest = hmac.new(settings.HOSPITAL_PASSWORD_SECRET.encode(), message, hashlib.sha256).hexdigest()
    return digest[:PASSWORD_LENGTH].upper()


def verify_hospital_password(hospital_id: int, candidate: str, when: Optional[datetime] = None) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(hospital_password(hospital_id, when), candidate.strip().upper())


def verify_superadmin_password(candidate: str) -> bool:
    expected = getattr(settings, 'SUPERADMIN_PASSWORD', '')
    if not expected or not candidate:
        return False
    return hmac.compare_digest(expected.encode(), candidate.encode())
