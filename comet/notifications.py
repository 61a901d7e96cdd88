"""
================================================================================
BASIC COMET - NOTIFICATION HELPERS
================================================================================

@file        notifications.py
@description Creation, enrichment and display text for user notifications
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
Views create notifications through ``notify`` so that self-notifications are
skipped in one place. Reading code uses ``fetch_notifications`` which returns
plain dicts already carrying the actor profile, the post title and, for badge
notifications, the most recently earned badge.

Display helpers mirror what the client shows:
- format_notification_content(): title/body of a browser notification
- notification_text(): one-line text in the notification bell
- notification_icon(): icon name and colour per type
- notification_target(): where a click on the notification navigates

================================================================================
"""

import logging

from django.conf import settings
from django.utils import timezone

from .mentions import extract_mentions
from .models import Notification, User, UserBadge
from .serializers import badge_data, profile_summary

logger = logging.getLogger(__name__)

DEFAULT_ACTOR_NAME = "Someone"
DEFAULT_BROWSER_ICON = "/favicon.ico"

NOTIFICATION_ICONS = {
    'like': {'icon': 'heart', 'color': 'red'},
    'comment': {'icon': 'message-square', 'color': 'blue'},
    'follow': {'icon': 'user-plus', 'color': 'green'},
    'message': {'icon': 'mail', 'color': 'purple'},
    'mention': {'icon': 'at-sign', 'color': 'orange'},
    'badge': {'icon': 'award', 'color': 'yellow'},
    'group_post': {'icon': 'users', 'color': 'cyan'},
}


# ============================================================================
# DISPLAY TEXT
# ============================================================================

def format_notification_content(type, actor_name=None, post_title=None, badge_name=None):
    """
    Title and body for a browser notification.

    Example:
        format_notification_content('follow', 'Ada')
        -> {"title": "New Follower", "body": "Ada started following you"}
    """
    actor = actor_name or DEFAULT_ACTOR_NAME
    title_suffix = f': "{post_title[:40]}..."' if post_title else ''

    if type == 'like':
        return {"title": "New Like", "body": f"{actor} liked your post{title_suffix}"}
    if type == 'comment':
        return {"title": "New Comment", "body": f"{actor} commented on your post{title_suffix}"}
    if type == 'follow':
        return {"title": "New Follower", "body": f"{actor} started following you"}
    if type == 'message':
        return {"title": "New Message", "body": f"{actor} sent you a message"}
    if type == 'mention':
        where = f' in "{post_title[:40]}..."' if post_title else ''
        return {"title": "You were mentioned", "body": f"{actor} mentioned you{where}"}
    if type == 'badge':
        body = f'You earned the "{badge_name}" badge!' if badge_name else "You earned a new badge!"
        return {"title": "🏆 Achievement Unlocked!", "body": body}
    return {"title": "Notification", "body": "You have a new notification"}


def _short_title(title, limit=30):
    return title[:limit] + ('...' if len(title) > limit else '')


def notification_text(type, actor_name=None, post_title=None, badge_name=None):
    """One-line text shown in the notification bell dropdown."""
    actor = actor_name or DEFAULT_ACTOR_NAME
    quoted = f': "{_short_title(post_title)}"' if post_title else ''

    if type == 'like':
        return f"{actor} liked your post{quoted}"
    if type == 'comment':
        return f"{actor} commented on your post{quoted}"
    if type == 'follow':
        return f"{actor} started following you"
    if type == 'message':
        return f"{actor} sent you a message"
    if type == 'mention':
        return f'{actor} mentioned you in "{post_title}"' if post_title else f"{actor} mentioned you"
    if type == 'badge':
        return f"You earned a new badge: {badge_name or 'Achievement'}"
    if type == 'group_post':
        return f"{actor} posted in your group"
    return "New notification"


def notification_icon(type):
    return NOTIFICATION_ICONS.get(type, {'icon': 'bell', 'color': 'muted'})


def notification_target(type, actor_username=None, post_id=None):
    """Client route a click on the notification leads to, or None."""
    if type == 'follow' and actor_username:
        return f"/profile/{actor_username}"
    if type == 'message':
        return "/messages"
    if type == 'badge':
        return "/achievements"
    if post_id:
        return f"/article/{post_id}"
    return None


# ============================================================================
# CREATION
# ============================================================================

def notify(user, actor, type, **targets):
    """
    Create a notification for ``user`` unless the actor is the user.

    Returns:
        Notification or None when skipped
    """
    if actor is not None and actor.pk == user.pk:
        return None
    notification = Notification.objects.create(user=user, actor=actor, type=type, **targets)
    logger.info(f"Notification {notification.id} ({type}) for user {user.id}")
    return notification


def notify_mentions(text, actor, post=None, comment=None):
    """Send a 'mention' notification to every existing user mentioned in text."""
    created = []
    for username in extract_mentions(text):
        target = User.objects.filter(username__iexact=username).first()
        if target is None:
            continue
        notification = notify(target, actor, 'mention', post=post, comment=comment)
        if notification:
            created.append(notification)
    return created


# ============================================================================
# READING
# ============================================================================

def _latest_badge(user):
    earned = UserBadge.objects.filter(user=user).select_related('badge').first()
    return badge_data(earned.badge) if earned else None


def notification_data(notification, latest_badge=None):
    actor = notification.actor
    actor_name = actor.name if actor else None
    post_title = notification.post.title if notification.post_id and notification.post else None
    badge_name = latest_badge["name"] if latest_badge else None

    data = {
        "id": notification.id,
        "type": notification.type,
        "post_id": notification.post_id,
        "comment_id": notification.comment_id,
        "message_id": notification.message_id,
        "group_post_id": notification.group_post_id,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
        "created_at": notification.created_at.isoformat(),
        "actor": profile_summary(actor),
        "post": {"id": notification.post_id, "title": post_title} if post_title is not None else None,
        "text": notification_text(notification.type, actor_name, post_title, badge_name),
        "icon": notification_icon(notification.type),
        "target": notification_target(
            notification.type,
            actor.username if actor else None,
            notification.post_id,
        ),
    }
    if notification.type == 'badge':
        data["latest_badge"] = latest_badge
    return data


def fetch_notifications(user, unread_only=False, limit=None):
    limit = limit or settings.NOTIFICATION_FETCH_LIMIT
    qs = Notification.objects.filter(user=user).select_related('actor', 'post')
    if unread_only:
        qs = qs.filter(read_at__isnull=True)
    notifications = list(qs[:limit])

    latest_badge = None
    if any(n.type == 'badge' for n in notifications):
        latest_badge = _latest_badge(user)
    return [notification_data(n, latest_badge) for n in notifications]


def unread_notification_count(user):
    return Notification.objects.filter(user=user, read_at__isnull=True).count()


def mark_all_read(user):
    return Notification.objects.filter(user=user, read_at__isnull=True).update(read_at=timezone.now())


def browser_payload(notification):
    """
    Ready-to-show browser notification for a freshly created row.

    The tag is the notification id so a repeated delivery replaces the
    previous popup instead of stacking.
    """
    actor = notification.actor
    badge_name = None
    if notification.type == 'badge':
        latest = _latest_badge(notification.user)
        badge_name = latest["name"] if latest else None
    post_title = notification.post.title if notification.post_id and notification.post else None

    content = format_notification_content(
        notification.type,
        actor.name if actor else None,
        post_title,
        badge_name,
    )
    avatar = profile_summary(actor)["avatar_url"] if actor else None
    content.update({
        "icon": avatar or DEFAULT_BROWSER_ICON,
        "tag": str(notification.id),
        "target": notification_target(
            notification.type,
            actor.username if actor else None,
            notification.post_id,
        ),
    })
    return content
