"""
WSGI entry point for the telemetry dashboard backend.

Point gunicorn (or any WSGI server) at ``config.wsgi:application``.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
