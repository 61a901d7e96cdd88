"""
Conversation bookkeeping shared by the messaging views and the unread
counters: conversation summaries, unread counts, direct conversation lookup
and message sending.
"""

import logging
from datetime import datetime, timezone as dt_timezone

from django.db import transaction
from django.utils import timezone

from .models import Conversation, ConversationParticipant, Message
from .notifications import notify
from .serializers import message_data, profile_summary

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)
UNKNOWN_USER = {"id": None, "username": None, "display_name": "Unknown User", "avatar_url": None}
DEFAULT_GROUP_NAME = "Group Chat"


class MessageRejected(Exception):
    pass


def unread_in(conversation_id, user, last_read_at):
    return (
        Message.objects.filter(conversation_id=conversation_id, created_at__gt=last_read_at or EPOCH)
        .exclude(sender=user)
        .count()
    )


def total_unread_messages(user):
    return sum(
        unread_in(p.conversation_id, user, p.last_read_at)
        for p in ConversationParticipant.objects.filter(user=user)
    )


def _last_message(conversation):
    return conversation.messages.select_related('sender').order_by('-created_at').first()


def conversation_summaries(user, is_group=False):
    """
    The user's conversations, most recently active first.

    Direct conversations carry ``other_user``; group chats carry the
    participant list and a name defaulting to "Group Chat".
    """
    participations = {
        p.conversation_id: p
        for p in ConversationParticipant.objects.filter(user=user, conversation__is_group=is_group)
    }
    conversations = (
        Conversation.objects.filter(id__in=list(participations))
        .prefetch_related('participants__user')
        .order_by('-updated_at')
    )

    results = []
    for conv in conversations:
        last = _last_message(conv)
        item = {
            "id": conv.id,
            "is_group": conv.is_group,
            "updated_at": conv.updated_at.isoformat(),
            "last_message": message_data(last) if last else None,
            "unread_count": unread_in(conv.id, user, participations[conv.id].last_read_at),
        }
        others = [p.user for p in conv.participants.all() if p.user_id != user.id]
        if is_group:
            item.update({
                "name": conv.name or DEFAULT_GROUP_NAME,
                "avatar_url": conv.avatar_url or None,
                "created_by": conv.created_by_id,
                "participants": [profile_summary(p.user) for p in conv.participants.all()],
            })
        else:
            item["other_user"] = profile_summary(others[0]) if others else UNKNOWN_USER
        results.append(item)
    return results


def get_or_create_direct(user, other):
    """Existing one-to-one conversation between the two users, or a new one."""
    mine = ConversationParticipant.objects.filter(
        user=user, conversation__is_group=False
    ).values_list('conversation_id', flat=True)
    shared = ConversationParticipant.objects.filter(
        user=other, conversation_id__in=list(mine)
    ).values_list('conversation_id', flat=True)
    for conversation_id in shared:
        if ConversationParticipant.objects.filter(conversation_id=conversation_id).count() == 2:
            return Conversation.objects.get(id=conversation_id), False

    with transaction.atomic():
        conversation = Conversation.objects.create(is_group=False, created_by=user)
        ConversationParticipant.objects.bulk_create([
            ConversationParticipant(conversation=conversation, user=user),
            ConversationParticipant(conversation=conversation, user=other),
        ])
    logger.info(f"Conversation {conversation.id} created between {user.id} and {other.id}")
    return conversation, True


def mark_read(conversation, user):
    return ConversationParticipant.objects.filter(conversation=conversation, user=user).update(
        last_read_at=timezone.now()
    )


def send_message(conversation, sender, content='', attachment=None):
    """
    Store a message and notify the other participants.

    Args:
        attachment: Optional {"url", "type", "name"} from an upload

    Raises:
        MessageRejected: Neither text nor attachment
    """
    content = (content or '').strip()
    if not content and not attachment:
        raise MessageRejected("Message cannot be empty")
    if not content:
        content = "Sent an image" if attachment.get("type") == 'image' else "Sent a file"

    attachment = attachment or {}
    message = Message.objects.create(
        conversation=conversation,
        sender=sender,
        content=content,
        attachment_url=attachment.get("url") or '',
        attachment_type=attachment.get("type") or '',
        attachment_name=attachment.get("name") or '',
    )
    # Touch updated_at so the conversation moves to the top of the list
    conversation.save(update_fields=['updated_at'])

    for participant in conversation.participants.exclude(user=sender).select_related('user'):
        notify(participant.user, sender, 'message', message=message)
    return message
