"""
WSGI config for The Rock Waste Management booking system.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'rockwaste.settings.production')

application = get_wsgi_application()
