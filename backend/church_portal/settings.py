"""
Django settings for the Church Portal discipleship backend.

Uses PostgreSQL as the database and django-rest-framework for the API layer.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key-change-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() in ('true', '1', 'yes')

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')

# Application definition
INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'rest_framework',
    'corsheaders',
    'django_q',
    'discipleship',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
]

# Don't redirect to add trailing slashes — API clients send exact URLs
APPEND_SLASH = False

ROOT_URLCONF = 'church_portal.urls'

WSGI_APPLICATION = 'church_portal.wsgi.application'

# Database — PostgreSQL in production, SQLite for local dev
DB_ENGINE = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.environ.get('DB_NAME', 'church_portal'),
            'USER': os.environ.get('DB_USER', 'postgres'),
            'PASSWORD': os.environ.get('DB_PASSWORD', 'postgres'),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }

# CORS
CORS_ALLOW_ALL_ORIGINS = DEBUG
CORS_ALLOWED_ORIGINS = [
    'http://localhost:3000',
    'http://127.0.0.1:3000',
]

# DRF
REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_PAGINATION_CLASS': None,
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [],
}

# Criticality policy config (provisional thresholds, see DESIGN.md)
CRITICALITY_CRITICAL_NEGATIVES = int(os.environ.get('CRITICALITY_CRITICAL_NEGATIVES', '3'))
CRITICALITY_HIGH_NEGATIVES = int(os.environ.get('CRITICALITY_HIGH_NEGATIVES', '2'))
CRITICALITY_HIGH_DAYS = int(os.environ.get('CRITICALITY_HIGH_DAYS', '3'))
CRITICALITY_MEDIUM_DAYS = int(os.environ.get('CRITICALITY_MEDIUM_DAYS', '7'))

# Queue config
DAYS_WITHOUT_CONTACT_RISK = int(os.environ.get('DAYS_WITHOUT_CONTACT_RISK', '7'))
ACOLHIMENTO_QUEUE_LIMIT = int(os.environ.get('ACOLHIMENTO_QUEUE_LIMIT', '500'))

# django-q2 — lightweight task queue using the ORM broker (no Redis needed)
Q_CLUSTER = {
    'name': 'church-portal',
    'workers': 2,
    'timeout': 300,
    'retry': 600,
    'orm': 'default',
    'bulk': 10,
    'catch_up': False,
}

CRITICALITY_SWEEP_MINUTES = int(os.environ.get('CRITICALITY_SWEEP_MINUTES', '60'))

# All datetimes are timezone-aware UTC
USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
}
