"""
Settings initialization - loads appropriate settings based on environment.
"""
import os

env = os.environ.get('DJANGO_ENV', 'development')

if env == 'testing':
    from .testing import *
else:
    from .development import *
