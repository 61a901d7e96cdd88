import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .context_processors import unread_counts
from .http import bool_field, error, json_body, text_field
from .models import Notification
from .notifications import fetch_notifications, mark_all_read, unread_notification_count
from .realtime import events_since

logger = logging.getLogger(__name__)

BROWSER_PERMISSIONS = ('unsupported', 'default', 'granted', 'denied')


@login_required
@require_GET
def notifications_view(request):
    unread_only = request.GET.get('filter') == 'unread'
    return JsonResponse({
        "results": fetch_notifications(request.user, unread_only=unread_only),
        "unread_count": unread_notification_count(request.user),
    })


@login_required
@require_GET
def unread_count(request):
    return JsonResponse({"unread_count": unread_notification_count(request.user)})


@login_required
@require_POST
def mark_notification_read(request, notification_id):
    notification = get_object_or_404(Notification, id=notification_id, user=request.user)
    if notification.read_at is None:
        notification.read_at = timezone.now()
        notification.save(update_fields=['read_at'])
    return JsonResponse({"id": notification.id, "read_at": notification.read_at.isoformat()})


@login_required
@require_POST
def mark_all_notifications_read(request):
    updated = mark_all_read(request.user)
    return JsonResponse({"success": True, "updated": updated})


@login_required
@require_http_methods(["DELETE", "POST"])
def delete_notification(request, notification_id):
    """Delete a specific notification"""
    deleted, _ = Notification.objects.filter(id=notification_id, user=request.user).delete()
    if not deleted:
        return error("Notification not found", status=404)
    return JsonResponse({"success": True, "message": "Notification deleted."})


@login_required
@require_http_methods(["GET", "POST"])
def notification_preferences(request):
    """
    Browser notification opt-in.

    The client reports its Notification.permission; alerts are only enabled
    while permission is 'granted'.
    """
    user = request.user
    if request.method == "POST":
        data = json_body(request)
        permission = text_field(data, 'permission', 'granted')
        if permission not in BROWSER_PERMISSIONS:
            return error("Invalid permission state")
        enabled = bool_field(data, 'enabled', True) and permission == 'granted'
        user.browser_notifications_enabled = enabled
        user.save(update_fields=['browser_notifications_enabled'])
        logger.info(f"Browser notifications {'enabled' if enabled else 'disabled'} for {user.username}")

    return JsonResponse({"browser_notifications_enabled": user.browser_notifications_enabled})


@login_required
@require_GET
def realtime_events(request):
    """Events pushed to this user after the ``since`` cursor."""
    try:
        since = int(request.GET.get('since', 0))
    except ValueError:
        return error("since must be an integer")
    events = events_since(request.user.id, since)
    return JsonResponse({
        "events": events,
        "cursor": events[-1]["id"] if events else since,
    })


@login_required
@require_GET
def unread_counts_view(request):
    return JsonResponse(unread_counts(request))
