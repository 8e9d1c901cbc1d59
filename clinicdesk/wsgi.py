"""
WSGI config for the clinicdesk project.

Serves HTTP only.  WebSocket queue updates need the ASGI entrypoint in
``clinicdesk.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinicdesk.settings')

application = get_wsgi_application()
