"""
================================================================================
BASIC COMET - CONTEXT PROCESSORS
================================================================================

@file        context_processors.py
@description Unread counters available to every template and the API
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
unread_counts() injects two numbers into every template:

    {{ unread_messages_count }}
    {{ unread_notifications_count }}

The same dict is served as JSON by ``/api/v1/unread-counts`` so the client
header badges stay in sync with server-rendered pages.

QUERY LOGIC
================================================================================
Notifications:
    - read_at is null
    - 'message' notifications are excluded, the messages badge covers them

Messages:
    - every conversation the user participates in
    - messages from others newer than the participant's last_read_at
      (all of them when the conversation was never opened)

================================================================================
"""

from .messaging import total_unread_messages
from .models import Notification


def unread_counts(request):
    """
    Inject unread message and notification counts into all templates.

    Returns:
        dict: unread_messages_count, unread_notifications_count
    """
    if not request.user.is_authenticated:
        return {
            "unread_messages_count": 0,
            "unread_notifications_count": 0,
        }

    unread_notifications = Notification.objects.filter(
        user=request.user,
        read_at__isnull=True,
    ).exclude(type='message').count()

    return {
        "unread_messages_count": total_unread_messages(request.user),
        "unread_notifications_count": unread_notifications,
    }
