import logging
import os
import time

from django.contrib.auth.decorators import login_required
from django.core.files.storage import default_storage
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.crypto import get_random_string
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .http import bool_field, error, int_field, json_body, list_field, text_field
from .messaging import (
    DEFAULT_GROUP_NAME, MessageRejected, conversation_summaries, get_or_create_direct,
    mark_read, send_message, total_unread_messages,
)
from .models import Conversation, ConversationParticipant, User
from .presence import set_typing, typing_text, typing_users
from .serializers import message_data, profile_summary

logger = logging.getLogger(__name__)

ATTACHMENT_BUCKET = "message-attachments"
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024


def _participant_conversation(request, conversation_id):
    """The conversation, 404 unless the current user takes part in it."""
    return get_object_or_404(
        Conversation,
        id=conversation_id,
        participants__user=request.user,
    )


# ============================================================================
# SECTION 1: DIRECT CONVERSATIONS
# ============================================================================

@login_required
@require_http_methods(["GET", "POST"])
def conversations(request):
    """GET lists direct conversations, POST opens one with another user."""
    if request.method == "GET":
        items = conversation_summaries(request.user, is_group=False)
        return JsonResponse({
            "results": items,
            "total_unread": total_unread_messages(request.user),
        })

    data = json_body(request)
    username = text_field(data, 'username')
    user_id = int_field(data, 'user_id')
    if username:
        other = get_object_or_404(User, username=username)
    elif user_id:
        other = get_object_or_404(User, id=user_id)
    else:
        return error("username or user_id required")
    if other.pk == request.user.pk:
        return error("Cannot message yourself")

    conversation, created = get_or_create_direct(request.user, other)
    return JsonResponse(
        {"id": conversation.id, "created": created, "other_user": profile_summary(other)},
        status=201 if created else 200,
    )


@login_required
@require_http_methods(["GET", "POST"])
def conversation_messages(request, conversation_id):
    conversation = _participant_conversation(request, conversation_id)

    if request.method == "GET":
        messages = conversation.messages.select_related('sender').order_by('created_at')
        results = [message_data(m) for m in messages]
        mark_read(conversation, request.user)
        return JsonResponse({"results": results})

    data = json_body(request)
    attachment = None
    attachment_url = text_field(data, 'attachment_url')
    if attachment_url:
        attachment = {
            "url": attachment_url,
            "type": text_field(data, 'attachment_type') or 'file',
            "name": text_field(data, 'attachment_name'),
        }
    try:
        message = send_message(conversation, request.user, text_field(data, 'content'), attachment)
    except MessageRejected as e:
        return error(str(e))

    set_typing(conversation.id, request.user, False)
    return JsonResponse({"message": message_data(message)}, status=201)


@login_required
@require_POST
def mark_conversation_read(request, conversation_id):
    conversation = _participant_conversation(request, conversation_id)
    mark_read(conversation, request.user)
    return JsonResponse({"success": True})


@login_required
@require_POST
def upload_attachment(request):
    upload = request.FILES.get('file')
    if upload is None:
        return error("No file provided")
    if upload.size > MAX_ATTACHMENT_SIZE:
        return error("File too large (max 10MB)")

    ext = os.path.splitext(upload.name)[1].lstrip('.').lower() or 'bin'
    path = f"{ATTACHMENT_BUCKET}/{request.user.id}/{int(time.time() * 1000)}-{get_random_string(7).lower()}.{ext}"
    stored = default_storage.save(path, upload)

    kind = 'image' if (upload.content_type or '').startswith('image/') else 'file'
    logger.info(f"Attachment stored at {stored} for user {request.user.id}")
    return JsonResponse({
        "url": default_storage.url(stored),
        "type": kind,
        "name": upload.name,
    }, status=201)


@login_required
@require_http_methods(["GET", "POST"])
def typing(request, conversation_id):
    """POST {"is_typing": bool} updates presence, GET reads who is typing."""
    conversation = _participant_conversation(request, conversation_id)
    if request.method == "POST":
        set_typing(conversation.id, request.user, bool_field(json_body(request), 'is_typing', True))

    users = typing_users(conversation.id, viewer_id=request.user.id)
    return JsonResponse({"typing": users, "text": typing_text(users)})


# ============================================================================
# SECTION 2: GROUP CHATS
# ============================================================================

def _group_chat(request, conversation_id):
    return get_object_or_404(
        Conversation,
        id=conversation_id,
        is_group=True,
        participants__user=request.user,
    )


@login_required
@require_http_methods(["GET", "POST"])
def group_chats(request):
    if request.method == "GET":
        return JsonResponse({"results": conversation_summaries(request.user, is_group=True)})

    data = json_body(request)
    name = text_field(data, 'name') or DEFAULT_GROUP_NAME
    member_ids = {int(i) for i in list_field(data, 'member_ids') if str(i).isdigit()}
    member_ids.add(request.user.id)
    members = list(User.objects.filter(id__in=member_ids))
    if len(members) < 2:
        return error("Add at least one other member")

    with transaction.atomic():
        conversation = Conversation.objects.create(
            name=name,
            is_group=True,
            created_by=request.user,
            avatar_url=text_field(data, 'avatar_url'),
        )
        ConversationParticipant.objects.bulk_create([
            ConversationParticipant(conversation=conversation, user=u) for u in members
        ])
    logger.info(f"Group chat {conversation.id} created by {request.user.username} with {len(members)} members")
    return JsonResponse({
        "id": conversation.id,
        "name": conversation.name,
        "participants": [profile_summary(u) for u in members],
    }, status=201)


@login_required
@require_http_methods(["PATCH", "POST"])
def update_group_chat(request, conversation_id):
    conversation = _group_chat(request, conversation_id)
    data = json_body(request)
    if 'name' in data:
        conversation.name = text_field(data, 'name')
    if 'avatar_url' in data:
        conversation.avatar_url = text_field(data, 'avatar_url')
    conversation.save()
    return JsonResponse({
        "id": conversation.id,
        "name": conversation.name or DEFAULT_GROUP_NAME,
        "avatar_url": conversation.avatar_url or None,
    })


@login_required
@require_POST
def add_group_chat_member(request, conversation_id):
    conversation = _group_chat(request, conversation_id)
    user_id = int_field(json_body(request), 'user_id')
    if user_id is None:
        return error("user_id required")
    user = get_object_or_404(User, id=user_id)
    _, created = ConversationParticipant.objects.get_or_create(conversation=conversation, user=user)
    if not created:
        return error("Already a member")
    return JsonResponse({"participant": profile_summary(user)}, status=201)


@login_required
@require_http_methods(["DELETE", "POST"])
def remove_group_chat_member(request, conversation_id, user_id):
    conversation = _group_chat(request, conversation_id)
    deleted, _ = ConversationParticipant.objects.filter(conversation=conversation, user_id=user_id).delete()
    if not deleted:
        return error("Not a member", status=404)
    return JsonResponse({"success": True})


@login_required
@require_POST
def leave_group_chat(request, conversation_id):
    conversation = _group_chat(request, conversation_id)
    ConversationParticipant.objects.filter(conversation=conversation, user=request.user).delete()
    return JsonResponse({"success": True})
