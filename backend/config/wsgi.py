"""
WSGI config for the Ask conversation backend.

The context endpoints are async views; under WSGI Django runs them in a
per-request event loop. Prefer ASGI (config.asgi):

    python manage.py runasgi
"""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

application = get_wsgi_application()
