"""
WSGI config for the upstac project.
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "upstac.settings")
application = get_wsgi_application()
