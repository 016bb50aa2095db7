"""
ASGI config for the ALIVE backend.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'alive.config.settings')

application = get_asgi_application()
