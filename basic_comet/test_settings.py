"""Settings used by the test suite."""

from .settings import *  # noqa: F401,F403

DEBUG = False
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.InMemoryStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
MEDIA_URL = '/media/'

AI_GATEWAY_API_KEY = 'test-gateway-key'
AI_GATEWAY_MODEL = 'google/gemini-2.5-flash'
ELEVENLABS_API_KEY = 'test-elevenlabs-key'
ELEVENLABS_STT_URL = 'https://api.elevenlabs.io/v1/speech-to-text'
ELEVENLABS_MODEL_ID = 'scribe_v1'

NOTIFICATION_FETCH_LIMIT = 50
TYPING_INDICATOR_TIMEOUT = 3

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'basic-comet-tests',
    }
}
