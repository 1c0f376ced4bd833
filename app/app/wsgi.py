"""
WSGI config for the Lumen booking API.
"""

import os
from django.core.wsgi import get_wsgi_application

# Web servers run with production settings unless told otherwise
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'app.settings.production')

application = get_wsgi_application()
