import os

os.environ.setdefault('SECRET_KEY', 'test-only-secret-key')

from .base import *  # noqa: E402

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

AXES_ENABLED = False
AUTHENTICATION_BACKENDS = ['django.contrib.auth.backends.ModelBackend']

SITE_URL = 'http://testserver'
