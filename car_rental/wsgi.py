"""WSGI entry point for the rental booking back office (gunicorn car_rental.wsgi)."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "car_rental.settings")

application = get_wsgi_application()
