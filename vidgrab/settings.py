"""
Django settings for vidgrab project.

Values are read from the environment so the same settings work for the
web app, the CLI and the test suite.
"""

import os
import tempfile
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-vidgrab-dev-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'downloads',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'vidgrab.urls'

WSGI_APPLICATION = 'vidgrab.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Transcoding
VIDGRAB_FFMPEG_BINARY = os.environ.get('VIDGRAB_FFMPEG_BINARY', 'ffmpeg')
VIDGRAB_TRANSCODE_TIMEOUT = float(os.environ.get('VIDGRAB_TRANSCODE_TIMEOUT', '600'))
VIDGRAB_SCRATCH_DIR = os.environ.get('VIDGRAB_SCRATCH_DIR', tempfile.gettempdir())
VIDGRAB_DEFAULT_FILE_BASE = os.environ.get('VIDGRAB_DEFAULT_FILE_BASE', 'video')

# UTF-8 bytes allowed in a derived file name, .mp4 included (capped at 233)
VIDGRAB_FILE_NAME_MAX_BYTES = int(os.environ.get('VIDGRAB_FILE_NAME_MAX_BYTES', '200'))

# Optional download log file; unset disables file logging
VIDGRAB_LOG_PATH = os.environ.get('VIDGRAB_LOG_PATH', '')
