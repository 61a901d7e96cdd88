"""
Typing indicator presence for conversations.

Each conversation keeps a small dict in the cache keyed by user id:

    {user_id: {"user_id": int, "display_name": str,
               "is_typing": bool, "updated_at": float}}

An entry counts as typing only while it is younger than
TYPING_INDICATOR_TIMEOUT seconds, so a client that stops sending updates
drops out on its own.
"""

import threading

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

DEFAULT_DISPLAY_NAME = "User"
PRESENCE_TTL = 60

_state_lock = threading.Lock()


def _key(conversation_id):
    return f"typing_{conversation_id}"


def set_typing(conversation_id, user, is_typing=True):
    with _state_lock:
        state = cache.get(_key(conversation_id)) or {}
        if is_typing:
            state[user.id] = {
                "user_id": user.id,
                "display_name": user.display_name or DEFAULT_DISPLAY_NAME,
                "is_typing": True,
                "updated_at": timezone.now().timestamp(),
            }
        else:
            state.pop(user.id, None)
        cache.set(_key(conversation_id), state, PRESENCE_TTL)
    return state.get(user.id)


def typing_users(conversation_id, viewer_id=None):
    """Users other than the viewer currently typing in the conversation."""
    now = timezone.now().timestamp()
    timeout = settings.TYPING_INDICATOR_TIMEOUT
    state = cache.get(_key(conversation_id)) or {}
    return [
        {"user_id": entry["user_id"], "display_name": entry["display_name"]}
        for entry in state.values()
        if entry["is_typing"]
        and entry["user_id"] != viewer_id
        and now - entry["updated_at"] < timeout
    ]


def typing_text(users):
    if not users:
        return None
    if len(users) == 1:
        return f"{users[0]['display_name']} is typing..."
    return f"{len(users)} people are typing..."
