"""
DRF exception handler producing the API's error envelope::

    {"ok": false, "error": {"code": "...", "message": ...}}

``message`` is a string for most errors and the field error mapping for
validation failures.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, ObjectDoesNotExist):
        return Response({'ok': False, 'error': {'code': 'not_found', 'message': str(exc) or 'Not found.'}}, status=404)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'view')
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    if isinstance(resp.data, dict) and set(resp.data) == {'detail'}:
        message = resp.data['detail']
    else:
        message = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=resp.status_code, headers=resp.headers)
