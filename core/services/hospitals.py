"""
Hospital (tenant) lifecycle: registration, staff login, subscription.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import transaction
from django.utils import timezone

from core.models import Hospital
from core.services.credentials import hospital_password, verify_hospital_password

User = get_user_model()
logger = logging.getLogger(__name__)


class LoginError(Exception):
    """Login refused; ``status`` is the HTTP status to answer with."""

    def __init__(self, message: str, status: int = 401):
        super().__init__(message)
        self.status = status


def format_hospital(h: Hospital, *, with_password: bool = False) -> dict:
    data = {
        'id': h.id,
        'name': h.name,
        'email': h.email,
        'phone': h.phone,
        'address': h.address,
        'subscriptionStatus': h.subscription_status,
        'subscriptionExpiry': h.subscription_expiry.isoformat() if h.subscription_expiry else None,
        'createdAt': h.created_at.isoformat() if h.created_at else None,
        'lastLogin': h.last_login.isoformat() if h.last_login else None,
    }
    if with_password:
        data['currentPassword'] = hospital_password(h.id)
    return data


def format_user(u) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'email': u.email,
        'role': u.role,
        'hospitalId': u.hospital_id,
        'lastLogin': u.last_login.isoformat() if u.last_login else None,
    }


@transaction.atomic
def register_hospital(*, hospital: dict, admin: dict) -> tuple[Hospital, object]:
    """Create a hospital on a trial subscription together with its admin."""
    if Hospital.objects.filter(email__iexact=hospital['email']).exists():
        raise ValueError('Hospital with this email already exists')
    h = Hospital.objects.create(
        name=hospital['name'],
        email=hospital['email'],
        phone=hospital.get('phone') or None,
        address=hospital.get('address') or None,
        subscription_status=Hospital.STATUS_ACTIVE,
        subscription_expiry=timezone.now() + timedelta(days=settings.TRIAL_DAYS),
    )
    user = User.objects.create_user(
        username=admin['username'],
        password=admin['password'],
        email=admin.get('email') or '',
        hospital=h,
        role=User.ROLE_ADMIN,
    )
    logger.info("hospital registered id=%s name=%s", h.id, h.name)
    return h, user


def find_hospital_by_password(password: str) -> Optional[Hospital]:
    """Return the hospital whose password for this month is ``password``."""
    if not password:
        return None
    for h in Hospital.objects.order_by('id'):
        if verify_hospital_password(h.id, password):
            return h
    return None


def login_staff(request, *, hospital_secret: str, username: str, password: str):
    """Authenticate a staff member; return ``(user, hospital)`` or raise LoginError."""
    h = find_hospital_by_password(hospital_secret)
    if h is None:
        raise LoginError('Invalid hospital password', 401)
    if h.subscription_status != Hospital.STATUS_ACTIVE:
        raise LoginError('Hospital subscription is not active', 403)
    user = authenticate(request, hospital=h, username=username, password=password)
    if user is None:
        raise LoginError('Invalid username or password', 401)
    now = timezone.now()
    user.last_login = now
    user.save(update_fields=['last_login'])
    h.last_login = now
    h.save(update_fields=['last_login'])
    logger.info("staff login hospital=%s user=%s", h.id, user.username)
    return user, h


def get_or_create_superadmin():
    user, created = User.objects.get_or_create(
        hospital=None, username='superadmin',
        defaults={'role': User.ROLE_SUPERADMIN, 'is_staff': True},
    )
    if created:
        user.set_unusable_password()
        user.save(update_fields=['password'])
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user


def set_status(h: Hospital, status: str) -> Hospital:
    if status not in dict(Hospital.STATUS_CHOICES):
        raise ValueError('Invalid status')
    h.subscription_status = status
    h.save(update_fields=['subscription_status'])
    logger.info("hospital %s status -> %s", h.id, status)
    return h


def extend_expiry(h: Hospital, *, expiry_date: Optional[datetime] = None, days_to_add: Optional[int] = None) -> Hospital:
    """Set or extend the subscription; either way the hospital becomes active.

    ``days_to_add`` counts from the current expiry, or from now when
    there is none.
    """
    if expiry_date is not None:
        h.subscription_expiry = expiry_date
    elif days_to_add is not None:
        base = h.subscription_expiry or timezone.now()
        h.subscription_expiry = base + timedelta(days=days_to_add)
    else:
        raise ValueError('Either expiryDate or daysToAdd is required')
    h.subscription_status = Hospital.STATUS_ACTIVE
    h.save(update_fields=['subscription_expiry', 'subscription_status'])
    logger.info("hospital %s expiry -> %s", h.id, h.subscription_expiry)
    return h


def expire_subscriptions(now: Optional[datetime] = None) -> int:
    """Mark active hospitals whose expiry has passed as expired."""
    now = now or timezone.now()
    return Hospital.objects.filter(
        subscription_status=Hospital.STATUS_ACTIVE,
        subscription_expiry__lt=now,
    ).update(subscription_status=Hospital.STATUS_EXPIRED)
