"""
WSGI config for the travelmall project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'travelmall.config.settings')

application = get_wsgi_application()
