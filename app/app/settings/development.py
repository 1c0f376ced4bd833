# app/settings/development.py
from .base import *

# Database for development
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'HOST': os.environ.get('DB_HOST', 'db'),
        'NAME': os.environ.get('DB_NAME', 'lumen'),
        'USER': os.environ.get('DB_USER', 'lumen'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'lumen'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}

# Development-specific settings
CORS_ALLOW_ALL_ORIGINS = True  # Be careful with this in production

DEBUG = os.getenv("DEBUG", "False") == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

LOGGING['loggers']['appointments'] = {
    'handlers': ['console'],
    'level': 'DEBUG',
    'propagate': False,
}
