# app/settings/production.py
from .base import *

DEBUG = False

# Parse ALLOWED_HOSTS from environment variable
ALLOWED_HOSTS_ENV = os.environ.get('ALLOWED_HOSTS', '')
if ALLOWED_HOSTS_ENV:
    ALLOWED_HOSTS = [host.strip() for host in ALLOWED_HOSTS_ENV.split(',') if host.strip()]
else:
    ALLOWED_HOSTS = ['localhost']

# Production database with SSL
DATABASES['default'].update({
    'OPTIONS': {
        'sslmode': os.environ.get('DB_SSL_MODE', 'require'),
    }
})

# Security settings
SECURE_SSL_REDIRECT = os.environ.get('SECURE_SSL_REDIRECT', 'False') == 'True'
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'SAMEORIGIN'

CSRF_COOKIE_SECURE = os.environ.get('HTTPS_ENABLED', 'False') == 'True'
SESSION_COOKIE_SECURE = os.environ.get('HTTPS_ENABLED', 'False') == 'True'

# CSRF trusted origins from environment
CSRF_TRUSTED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get('CSRF_TRUSTED_ORIGINS', '').split(',')
    if origin.strip()
]

# CORS settings
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get('CORS_ALLOWED_ORIGINS', '').split(',')
    if origin.strip()
]
CORS_ALLOW_HEADERS = [
    'accept',
    'accept-encoding',
    'authorization',
    'content-type',
    'origin',
    'user-agent',
    'x-csrftoken',
    'x-requested-with',
]

STATIC_ROOT = '/app/staticfiles/'

# Logging for production
LOGGING['formatters']['verbose']['format'] = '{levelname} {asctime} {module} {process:d} {thread:d} {message}'
LOGGING['loggers'].update({
    'django': {
        'handlers': ['console'],
        'level': 'INFO',
        'propagate': False,
    },
    'users': {
        'handlers': ['console'],
        'level': 'WARNING',  # Less verbose in production
        'propagate': False,
    },
    'clients': {
        'handlers': ['console'],
        'level': 'WARNING',
        'propagate': False,
    },
})
