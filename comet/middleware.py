"""
================================================================================
BASIC COMET - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Timezone activation, presence tracking and JSON error mapping
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
1. TimezoneMiddleware
   - Activates the authenticated user's timezone, UTC otherwise

2. UpdateLastSeenMiddleware
   - Writes user.last_seen at most once every 30 seconds
   - Powers the "online" dot (User.is_online, 5 minute window)

3. JsonErrorMiddleware
   - Turns http.BadRequest raised by a view into a 400 JSON answer

CACHING STRATEGY
================================================================================
UpdateLastSeenMiddleware keeps two cache keys:

    "last_seen_update_{user_id}"  write throttle, 30 seconds
    "user_{user_id}_last_seen"    fast read of the last timestamp, 5 minutes

================================================================================
"""

import logging
from datetime import timedelta

import pytz
from django.core.cache import cache
from django.db import DatabaseError
from django.utils import timezone

from .http import BadRequest, error

logger = logging.getLogger(__name__)

LAST_SEEN_WRITE_INTERVAL = 30
LAST_SEEN_READ_TTL = 300


# ============================================================================
# TIMEZONE MIDDLEWARE
# ============================================================================

class TimezoneMiddleware:
    """
    Activate the user's timezone for datetime rendering.

    Invalid or missing timezone strings fall back to UTC.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.user.is_authenticated:
            try:
                timezone.activate(pytz.timezone(request.user.timezone))
            except (pytz.UnknownTimeZoneError, AttributeError):
                timezone.activate(pytz.UTC)
        else:
            timezone.activate(pytz.UTC)

        return self.get_response(request)


# ============================================================================
# LAST SEEN / PRESENCE TRACKING MIDDLEWARE
# ============================================================================

class UpdateLastSeenMiddleware:
    """
    Update user.last_seen with a 30 second write throttle.

    A failed write is logged and the request continues.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if getattr(request, 'user', None) and request.user.is_authenticated:
            now = timezone.now()
            cache_key = f"last_seen_update_{request.user.id}"
            last_update = cache.get(cache_key)

            if not last_update or (now - last_update) > timedelta(seconds=LAST_SEEN_WRITE_INTERVAL):
                request.user.last_seen = now
                try:
                    request.user.save(update_fields=['last_seen'])
                    cache.set(cache_key, now, LAST_SEEN_WRITE_INTERVAL)
                except DatabaseError:
                    logger.exception(f"Failed to update last_seen for user {request.user.id}")

                cache.set(f"user_{request.user.id}_last_seen", now, LAST_SEEN_READ_TTL)

        return self.get_response(request)


# ============================================================================
# JSON ERROR MIDDLEWARE
# ============================================================================

class JsonErrorMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, BadRequest):
            logger.warning(f"Bad request to {request.path}: {exception}")
            return error(str(exception))
        return None
