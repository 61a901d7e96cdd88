import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .http import error, int_field, json_body, text_field
from .models import GROUP_PRIVACY_CHOICES, Group, GroupComment, GroupMember, GroupPost, GroupPostLike, User
from .notifications import notify
from .serializers import (
    group_comment_data, group_data, group_post_data, profile_summary,
)

logger = logging.getLogger(__name__)

PRIVACY_VALUES = {p for p, _ in GROUP_PRIVACY_CHOICES}


def _membership(group, user):
    if not user.is_authenticated:
        return None
    return GroupMember.objects.filter(group=group, user=user).first()


def _can_view(group, membership):
    return group.privacy == 'public' or membership is not None


# ============================================================================
# SECTION 1: GROUPS
# ============================================================================

@require_http_methods(["GET", "POST"])
def groups(request):
    """GET lists every group newest first, POST creates one."""
    if request.method == "GET":
        qs = Group.objects.select_related('creator').order_by('-created_at')
        return JsonResponse({"results": [group_data(g) for g in qs]})

    if not request.user.is_authenticated:
        return error("Authentication required", status=401)

    data = json_body(request)
    name = text_field(data, 'name')
    privacy = text_field(data, 'privacy') or 'public'
    if not name:
        return error("Group name required")
    if privacy not in PRIVACY_VALUES:
        return error("Invalid privacy setting")

    with transaction.atomic():
        group = Group.objects.create(
            name=name,
            description=text_field(data, 'description'),
            privacy=privacy,
            creator=request.user,
            members_count=1,
        )
        GroupMember.objects.create(group=group, user=request.user, role='admin')
        if 'avatar' in request.FILES:
            group.avatar = request.FILES['avatar']
            group.save(update_fields=['avatar'])

    logger.info(f"Group {group.id} '{group.name}' created by {request.user.username}")
    return JsonResponse({"group": group_data(group)}, status=201)


@login_required
@require_GET
def my_groups(request):
    qs = (
        Group.objects.filter(members__user=request.user)
        .select_related('creator')
        .order_by('-updated_at')
    )
    return JsonResponse({"results": [group_data(g) for g in qs]})


@require_GET
def group_detail(request, group_id):
    group = get_object_or_404(Group.objects.select_related('creator'), id=group_id)
    membership = _membership(group, request.user)
    return JsonResponse({
        "group": group_data(group),
        "is_member": membership is not None,
        "role": membership.role if membership else None,
        "is_admin": bool(membership and membership.role == 'admin'),
    })


@login_required
@require_POST
def join_group(request, group_id):
    group = get_object_or_404(Group, id=group_id)
    if group.privacy == 'private':
        return error("This group is private, ask an admin to add you", status=403)

    _, created = GroupMember.objects.get_or_create(group=group, user=request.user, defaults={"role": 'member'})
    if not created:
        return error("Already a member")
    Group.increment(group.id, 'members_count')
    group.refresh_from_db(fields=['members_count'])
    return JsonResponse({"joined": True, "members_count": group.members_count})


@login_required
@require_POST
def leave_group(request, group_id):
    group = get_object_or_404(Group, id=group_id)
    deleted, _ = GroupMember.objects.filter(group=group, user=request.user).delete()
    if not deleted:
        return error("Not a member")
    Group.decrement(group.id, 'members_count')
    group.refresh_from_db(fields=['members_count'])
    return JsonResponse({"left": True, "members_count": group.members_count})


@require_http_methods(["GET", "POST"])
def group_members(request, group_id):
    """GET lists members in joining order, POST lets an admin add a user."""
    group = get_object_or_404(Group, id=group_id)
    membership = _membership(group, request.user)

    if request.method == "GET":
        if not _can_view(group, membership):
            return error("This group is private", status=403)
        rows = GroupMember.objects.filter(group=group).select_related('user').order_by('joined_at')
        return JsonResponse({"results": [
            {"user": profile_summary(m.user), "role": m.role, "joined_at": m.joined_at.isoformat()}
            for m in rows
        ]})

    if not membership or membership.role != 'admin':
        return error("Only group admins can add members", status=403)

    user_id = int_field(json_body(request), 'user_id')
    if user_id is None:
        return error("user_id required")
    user = get_object_or_404(User, id=user_id)
    _, created = GroupMember.objects.get_or_create(group=group, user=user, defaults={"role": 'member'})
    if not created:
        return error("Already a member")
    Group.increment(group.id, 'members_count')
    return JsonResponse({"member": profile_summary(user)}, status=201)


# ============================================================================
# SECTION 2: GROUP POSTS
# ============================================================================

@require_http_methods(["GET", "POST"])
def group_posts(request, group_id):
    group = get_object_or_404(Group, id=group_id)
    membership = _membership(group, request.user)

    if request.method == "GET":
        if not _can_view(group, membership):
            return error("This group is private", status=403)
        qs = GroupPost.objects.filter(group=group).select_related('user').order_by('-created_at')
        liked = set()
        if request.user.is_authenticated:
            liked = set(GroupPostLike.objects.filter(
                user=request.user, post__group=group
            ).values_list('post_id', flat=True))
        return JsonResponse({"results": [
            {**group_post_data(p), "is_liked": p.id in liked} for p in qs
        ]})

    if membership is None:
        return error("Join the group to post", status=403)

    data = json_body(request)
    content = text_field(data, 'content')
    if not content:
        return error("Content required")

    post = GroupPost.objects.create(
        group=group,
        user=request.user,
        title=text_field(data, 'title'),
        content=content,
    )
    Group.increment(group.id, 'posts_count')
    # Touch updated_at so the group rises in "my groups"
    group.save(update_fields=['updated_at'])
    notify(group.creator, request.user, 'group_post', group_post=post)
    return JsonResponse({"post": group_post_data(post)}, status=201)


@login_required
@require_POST
def toggle_group_post_like(request, post_id):
    post = get_object_or_404(GroupPost.objects.select_related('group'), id=post_id)
    if not _can_view(post.group, _membership(post.group, request.user)):
        return error("This group is private", status=403)

    with transaction.atomic():
        like, created = GroupPostLike.objects.get_or_create(post=post, user=request.user)
        if created:
            GroupPost.increment(post.id, 'likes_count')
        else:
            like.delete()
            GroupPost.decrement(post.id, 'likes_count')
    post.refresh_from_db(fields=['likes_count'])
    return JsonResponse({"liked": created, "likes_count": post.likes_count})


@require_http_methods(["GET", "POST"])
def group_post_comments(request, post_id):
    post = get_object_or_404(GroupPost.objects.select_related('group'), id=post_id)
    membership = _membership(post.group, request.user)
    if not _can_view(post.group, membership):
        return error("This group is private", status=403)

    if request.method == "GET":
        qs = GroupComment.objects.filter(post=post).select_related('user').order_by('created_at')
        return JsonResponse({"results": [group_comment_data(c) for c in qs]})

    if not request.user.is_authenticated:
        return error("Authentication required", status=401)
    content = text_field(json_body(request), 'content')
    if not content:
        return error("Comment cannot be empty")

    comment = GroupComment.objects.create(post=post, user=request.user, content=content)
    GroupPost.increment(post.id, 'comments_count')
    return JsonResponse({"comment": group_comment_data(comment)}, status=201)


@login_required
@require_http_methods(["DELETE", "POST"])
def delete_group_comment(request, comment_id):
    comment = get_object_or_404(GroupComment, id=comment_id, user=request.user)
    post_id = comment.post_id
    comment.delete()
    GroupPost.decrement(post_id, 'comments_count')
    return JsonResponse({"message": "Comment deleted"})
