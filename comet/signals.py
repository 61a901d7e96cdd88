"""
Row change publishing and the built-in inbox subscribers.

Every save or delete of a Notification, UserBadge or Message is published to
the change feed under its table name. The subscribers registered by
``connect_inbox_subscribers`` copy the events a user should see live into
that user's inbox (realtime.push_event).
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import ConversationParticipant, Message, Notification, UserBadge
from .notifications import browser_payload, notification_data
from .realtime import feed, push_event, row_to_dict
from .serializers import badge_data

logger = logging.getLogger(__name__)

TABLES = {
    Notification: 'notifications',
    UserBadge: 'user_badges',
    Message: 'messages',
}


# ============================================================================
# PUBLISHING
# ============================================================================

@receiver(post_save, sender=Notification)
@receiver(post_save, sender=UserBadge)
@receiver(post_save, sender=Message)
def publish_save(sender, instance, created, **kwargs):
    feed.publish(TABLES[sender], 'INSERT' if created else 'UPDATE', new=row_to_dict(instance))


@receiver(post_delete, sender=Notification)
@receiver(post_delete, sender=UserBadge)
@receiver(post_delete, sender=Message)
def publish_delete(sender, instance, **kwargs):
    feed.publish(TABLES[sender], 'DELETE', old=row_to_dict(instance))


# ============================================================================
# INBOX SUBSCRIBERS
# ============================================================================

def notification_to_inbox(change):
    notification = (
        Notification.objects.select_related('user', 'actor', 'post')
        .filter(id=change["new"]["id"]).first()
    )
    if notification is None:
        return
    payload = {"notification": notification_data(notification)}
    if notification.user.browser_notifications_enabled:
        payload["browser"] = browser_payload(notification)
    push_event(notification.user_id, 'notification', payload)


def badge_to_inbox(change):
    earned = UserBadge.objects.select_related('badge').filter(id=change["new"]["id"]).first()
    if earned is None:
        return
    push_event(earned.user_id, 'badge_earned', {
        "badge": badge_data(earned.badge),
        "earned_at": earned.earned_at.isoformat(),
    })


def message_to_inbox(change):
    row = change["new"]
    recipients = ConversationParticipant.objects.filter(
        conversation_id=row["conversation_id"]
    ).exclude(user_id=row["sender_id"]).values_list('user_id', flat=True)
    for user_id in recipients:
        push_event(user_id, 'message', {"message": row})


def connect_inbox_subscribers(change_feed=feed):
    subscriptions = [
        change_feed.subscribe('notifications', notification_to_inbox, event='INSERT'),
        change_feed.subscribe('user_badges', badge_to_inbox, event='INSERT'),
        change_feed.subscribe('messages', message_to_inbox, event='INSERT'),
    ]
    logger.debug(f"Connected {len(subscriptions)} inbox subscribers")
    return subscriptions
