# services/licensing-service/src/config/settings/development.py
from .base import *

DEBUG = True
ALLOWED_HOSTS = ['*']
CORS_ALLOW_ALL_ORIGINS = True
EVENT_BACKEND = os.environ.get('EVENT_BACKEND', 'memory')
LOGGING['handlers']['console']['formatter'] = 'standard'
LOGGING['root']['level'] = 'DEBUG'
