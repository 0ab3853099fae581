"""
WSGI config for the messaging backend.

HTTP-only fallback; WebSocket traffic needs the ASGI application in asgi.py.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
