"""
Django settings for bakery project.

Values come from the environment (optionally loaded from a ``.env`` file).
For the full list of settings and their values, see
https://docs.djangoproject.com/en/5.2/ref/settings/
"""

import os
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name: str, default: str = '') -> list:
    return [part.strip() for part in os.getenv(name, default).split(',') if part.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-bakery-dev-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver')


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'django_filters',
    'orders',
    'analytics',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'bakery.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'bakery.wsgi.application'


# Database

if os.getenv('DB_ENGINE', 'sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME', 'bakery'),
            'USER': os.getenv('DB_USER', 'bakery'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Internationalization

LANGUAGE_CODE = 'es-ec'

TIME_ZONE = os.getenv('TIME_ZONE', 'America/Guayaquil')

USE_I18N = True

USE_TZ = True

STATIC_URL = 'static/'


# REST framework

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.LimitOffsetPagination',
    'PAGE_SIZE': 100,
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=int(os.getenv('JWT_ACCESS_HOURS', '12'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
}


# Accounting service (Contifico)

ACCOUNTING = {
    'BASE_URL': os.getenv('ACCOUNTING_BASE_URL', 'https://api.contifico.com/sistema/api/v1'),
    'API_KEY': os.getenv('ACCOUNTING_API_KEY', ''),
    'POS_TOKEN': os.getenv('ACCOUNTING_POS_TOKEN', ''),
    'DEFAULT_PRODUCT_ID': os.getenv('ACCOUNTING_DEFAULT_PRODUCT_ID', ''),
    'TAX_RATE': Decimal(os.getenv('ACCOUNTING_TAX_RATE', '15')),
    'DOCUMENT_PREFIX': os.getenv('ACCOUNTING_DOCUMENT_PREFIX', '001-001'),
    'PAYMENT_METHOD': os.getenv('ACCOUNTING_PAYMENT_METHOD', 'TRA'),
    'TIMEOUT': float(os.getenv('ACCOUNTING_TIMEOUT', '30')),
    # 'contifico' talks to the real API, 'mock' keeps everything in memory.
    'ADAPTER': os.getenv('ACCOUNTING_ADAPTER', 'contifico'),
}


# Production and dispatch

DISPATCH_EDIT_WINDOW = timedelta(minutes=int(os.getenv('DISPATCH_EDIT_WINDOW_MINUTES', '60')))

DISPATCH_SYSTEM_LABEL = os.getenv('DISPATCH_SYSTEM_LABEL', 'Sistema (Despacho automático)')

INVOICE_BATCH_SIZE = int(os.getenv('INVOICE_BATCH_SIZE', '5'))


# Logging

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
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
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
    },
}
