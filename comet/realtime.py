"""
================================================================================
BASIC COMET - REAL-TIME CHANGE FEED
================================================================================

@file        realtime.py
@description In-process change feed and per-user event inbox
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
Model signals (see signals.py) publish row changes here as

    {"event": "INSERT" | "UPDATE" | "DELETE", "table": str,
     "new": dict, "old": dict}

Subscribers register a callback for a table, optionally narrowed to one event
and an equality filter written as ``"<column>=eq.<value>"``:

    sub = feed.subscribe('notifications', on_insert,
                         event='INSERT', filter=f'user_id=eq.{user.id}')
    ...
    feed.unsubscribe(sub)

Browsers cannot hold an in-process callback, so the built-in subscribers
(signals.py) copy the events each user cares about into a bounded inbox
kept in the Django cache. Clients poll ``/api/v1/realtime/events?since=<id>``.

Delivery is best effort: no retries, no ordering guarantees across workers.

================================================================================
"""

import logging
import threading
from itertools import count

from django.core.cache import cache

logger = logging.getLogger(__name__)

EVENTS = ('INSERT', 'UPDATE', 'DELETE')

INBOX_SIZE = 100
INBOX_TTL = 60 * 60
INBOX_SEQUENCE_KEY = "realtime_event_seq"

# Guards the get-append-set on a cached inbox. Holds within one process only,
# which matches the per-process locmem cache.
_inbox_lock = threading.Lock()


def parse_filter(expression):
    """
    "user_id=eq.5" -> ("user_id", "5")

    Raises:
        ValueError: For anything other than an equality filter
    """
    column, sep, rest = (expression or '').partition('=')
    if not sep or not rest.startswith('eq.') or not column:
        raise ValueError(f"Unsupported filter: {expression!r}")
    return column, rest[3:]


class Subscription:
    def __init__(self, table, callback, event, filter, id):
        self.table = table
        self.callback = callback
        self.event = event
        self.filter = filter
        self.id = id

    def matches(self, change):
        if change["table"] != self.table:
            return False
        if self.event != '*' and change["event"] != self.event:
            return False
        if self.filter:
            column, value = self.filter
            row = change["new"] or change["old"] or {}
            return str(row.get(column)) == value
        return True


class ChangeFeed:
    """Fan-out of row changes to in-process subscribers."""

    def __init__(self):
        self._subscriptions = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def subscribe(self, table, callback, event='*', filter=None):
        if event != '*' and event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        parsed = parse_filter(filter) if filter else None
        with self._lock:
            sub = Subscription(table, callback, event, parsed, next(self._ids))
            self._subscriptions[sub.id] = sub
        return sub

    def unsubscribe(self, subscription):
        with self._lock:
            return self._subscriptions.pop(subscription.id, None) is not None

    def publish(self, table, event, new=None, old=None):
        change = {"event": event, "table": table, "new": new or {}, "old": old or {}}
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]
        for sub in targets:
            try:
                sub.callback(change)
            except Exception:
                logger.exception(f"Change feed subscriber {sub.id} failed on {table} {event}")
        return len(targets)

    def clear(self):
        with self._lock:
            self._subscriptions.clear()


feed = ChangeFeed()


def row_to_dict(instance):
    """Concrete column values keyed by column name (foreign keys as <name>_id)."""
    row = {}
    for f in instance._meta.concrete_fields:
        value = getattr(instance, f.attname)
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        row[f.attname] = value
    return row


# ============================================================================
# PER-USER INBOX
# ============================================================================

def _inbox_key(user_id):
    return f"realtime_inbox_{user_id}"


def push_event(user_id, kind, payload):
    """Append an event to a user's inbox and return its sequence id."""
    cache.add(INBOX_SEQUENCE_KEY, 0, None)
    event_id = cache.incr(INBOX_SEQUENCE_KEY)
    key = _inbox_key(user_id)
    with _inbox_lock:
        events = cache.get(key) or []
        events.append({"id": event_id, "kind": kind, "payload": payload})
        cache.set(key, events[-INBOX_SIZE:], INBOX_TTL)
    return event_id


def events_since(user_id, since=0):
    return [e for e in cache.get(_inbox_key(user_id)) or [] if e["id"] > since]


def clear_inbox(user_id):
    with _inbox_lock:
        cache.delete(_inbox_key(user_id))
