"""
Prescription template settings and the printable prescription.
"""
from __future__ import annotations

import logging
import re

from django.conf import settings
from django.http import HttpResponse
from django.urls import reverse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.models import Patient, PrescriptionTemplate
from core.permissions import IsHospitalAdmin, IsHospitalUser
from core.serializers.template import PrescriptionTemplateSerializer
from core.services import directory, documents
from core.services.patients import ensure_public_token

logger = logging.getLogger(__name__)


def _template_for(hospital) -> PrescriptionTemplate:
    """Stored template, or an unsaved one carrying the defaults."""
    tpl = PrescriptionTemplate.objects.filter(hospital=hospital).first()
    return tpl or PrescriptionTemplate(hospital=hospital)


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalUser])
def prescription_template(request):
    h = request.user.hospital
    tpl = _template_for(h)
    if request.method == 'GET':
        return Response(PrescriptionTemplateSerializer(tpl).data)

    if not IsHospitalAdmin().has_permission(request, None):
        return Response({'ok': False, 'detail': 'Hospital administrator role required'}, status=403)
    s = PrescriptionTemplateSerializer(tpl, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    s.save()
    logger.info("prescription template saved hospital=%s", h.id)
    return Response({'ok': True, 'template': s.data})


def _portal_url(request, public_token: str) -> str:
    path = reverse('public_prescription', args=[public_token])
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL + path
    return request.build_absolute_uri(path)


@api_view(['GET'])
@permission_classes([AllowAny])
def prescription_pdf(request, pk: int):
    """Render the visit's prescription.

    Staff fetch it with their credentials; the patient portal passes the
    visit's public token as ``?token=`` instead.
    """
    token = request.query_params.get('token')
    if token:
        patient = Patient.objects.select_related('hospital').filter(pk=pk, public_token=token).first()
    elif IsHospitalUser().has_permission(request, None):
        patient = Patient.objects.select_related('hospital').filter(
            pk=pk, hospital_id=request.user.hospital_id).first()
    else:
        return Response({'ok': False, 'detail': 'Not authenticated'}, status=401)
    if not patient:
        return Response({'ok': False, 'detail': 'Patient not found'}, status=404)

    public_token = ensure_public_token(patient)
    fallback = request.user.username if request.user and request.user.is_authenticated else 'Doctor'
    pdf = documents.render_prescription(
        patient, patient.hospital, _template_for(patient.hospital),
        doctor_name=directory.doctor_name(patient.doctor_id, default=fallback),
        portal_url=_portal_url(request, public_token),
    )
    safe_name = re.sub(r'[^A-Za-z0-9]', '_', patient.name)
    resp = HttpResponse(pdf, content_type='application/pdf')
    resp['Content-Disposition'] = f'attachment; filename="prescription_{safe_name}_{timezone.now():%Y%m%d%H%M%S}.pdf"'
    return resp
