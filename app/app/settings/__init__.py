# app/settings/__init__.py

"""
Django settings module selector

Picks the configuration matching DJANGO_SETTINGS_MODULE. The concrete
modules (development, production, test) can also be referenced directly.
"""

import os

# Default to development if not specified
settings_module = os.environ.get('DJANGO_SETTINGS_MODULE', 'app.settings.development')

if settings_module.endswith('production'):
    from .production import *
elif settings_module.endswith('development'):
    from .development import *
elif settings_module.endswith('test'):
    from .test import *
else:
    from .base import *
