"""
WSGI config for booking_calendar project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'booking_calendar.settings')

application = get_wsgi_application()
