import logging
import re

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.decorators import login_required
from django.core.validators import validate_email
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Case, IntegerField, Q, When
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .ai import GatewayError
from .badges import achievements, activity_leaders, badge_leaders, check_and_award_badges
from .http import error, int_field, json_body, paginate, text_field
from .mentions import render_mentions
from .models import (
    CATEGORY_CHOICES, POST_TYPE_CHOICES, Comment, Follow, Like, Post,
    ReadingHistory, User, UserBadge,
)
from .notifications import notify, notify_mentions
from .recommendations import recommend_post_ids
from .serializers import (
    badge_data, comment_data, post_summary, profile_detail, profile_summary,
)

# Logger
logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r'^[a-z0-9_]{3,20}$')
TAB_TYPES = {'posts': 'article', 'notes': 'note', 'videos': 'video'}
CATEGORY_IDS = {c for c, _ in CATEGORY_CHOICES}
POST_TYPES = {t for t, _ in POST_TYPE_CHOICES}
PROFILE_FIELDS = [
    ('display_name', 'Display Name'),
    ('username', 'Username'),
    ('avatar', 'Profile Picture'),
    ('bio', 'Bio'),
    ('location', 'Location'),
    ('website', 'Website'),
    ('cover', 'Cover Photo'),
]
EDITABLE_PROFILE_FIELDS = ['display_name', 'bio', 'location', 'website', 'twitter', 'github', 'linkedin', 'timezone']


# ============================================================================
# SECTION 1: AUTHENTICATION
# ============================================================================

@require_GET
@ensure_csrf_cookie
def csrf(request):
    return JsonResponse({"detail": "CSRF cookie set"})


@require_POST
def register(request):
    data = json_body(request)
    username = text_field(data, 'username')
    email = text_field(data, 'email')
    password = text_field(data, 'password', strip=False)
    confirmation = text_field(data, 'confirmation', password, strip=False)
    display_name = text_field(data, 'display_name') or username

    if not USERNAME_RE.match(username):
        return error("Username must be 3-20 characters: lowercase letters, numbers and underscores")
    try:
        validate_email(email)
    except ValidationError:
        return error("Invalid email address")
    if len(password) < 6:
        return error("Password must be at least 6 characters")
    if password != confirmation:
        return error("Passwords must match")
    if not 2 <= len(display_name) <= 50:
        return error("Display name must be between 2 and 50 characters")
    if User.objects.filter(username=username).exists():
        return error("Username already taken")
    if User.objects.filter(email__iexact=email).exists():
        return error("Email already registered")

    user = User.objects.create_user(username, email, password, display_name=display_name)

    login(request, user)
    logger.info(f"New user registered: {user.username}")
    return JsonResponse({"user": profile_detail(user)}, status=201)


@require_POST
def login_view(request):
    data = json_body(request)
    identifier = text_field(data, 'username') or text_field(data, 'email')
    password = text_field(data, 'password', strip=False)

    if '@' in identifier:
        match = User.objects.filter(email__iexact=identifier).first()
        identifier = match.username if match else identifier

    user = authenticate(request, username=identifier, password=password)
    if user is None:
        return error("Invalid username/email and/or password", status=401)

    login(request, user)
    return JsonResponse({"user": profile_detail(user)})


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({"message": "Logged out"})


@login_required
@require_GET
def me(request):
    return JsonResponse({"user": profile_detail(request.user)})


# ============================================================================
# SECTION 2: PROFILES & DISCOVERY
# ============================================================================

@require_GET
def profile(request, username):
    user = get_object_or_404(User, username=username)
    data = profile_detail(user)
    data.update({
        "posts_count": user.posts.filter(status='published').count(),
        "followers_count": user.followers.count(),
        "following_count": user.following.count(),
        "is_following": (
            request.user.is_authenticated
            and Follow.objects.filter(follower=request.user, following=user).exists()
        ),
        "is_self": request.user.is_authenticated and request.user.pk == user.pk,
    })
    return JsonResponse(data)


@login_required
@require_POST
def edit_profile(request):
    user = request.user
    data = json_body(request)

    new_username = text_field(data, 'username')
    if new_username and new_username != user.username:
        if not USERNAME_RE.match(new_username):
            return error("Username must be 3-20 characters: lowercase letters, numbers and underscores")
        if User.objects.filter(username=new_username).exclude(pk=user.pk).exists():
            return error("Username already taken")
        user.username = new_username

    for field in EDITABLE_PROFILE_FIELDS:
        if field in data:
            setattr(user, field, text_field(data, field))

    if 'avatar' in request.FILES:
        user.avatar = request.FILES['avatar']
    if 'cover' in request.FILES:
        user.cover = request.FILES['cover']

    try:
        user.full_clean(exclude=['password', 'avatar', 'cover', 'last_seen'])
    except ValidationError as e:
        return JsonResponse({"error": "Invalid profile", "fields": e.message_dict}, status=400)
    user.save()
    return JsonResponse({"user": profile_detail(user)})


@login_required
@require_GET
def profile_completion(request):
    user = request.user
    fields = [
        {"key": key, "label": label, "completed": bool(getattr(user, key))}
        for key, label in PROFILE_FIELDS
    ]
    completed = sum(1 for f in fields if f["completed"])
    return JsonResponse({
        "percentage": round(completed / len(fields) * 100),
        "fields": fields,
        "missing": [f["label"] for f in fields if not f["completed"]],
    })


@require_GET
def users_search(request):
    query = (request.GET.get('q') or '').strip()
    users = User.objects.filter(is_active=True)
    if query:
        users = users.filter(Q(username__icontains=query) | Q(display_name__icontains=query))
    users = users.order_by('display_name', 'username')[:20]
    return JsonResponse({"results": [profile_summary(u) for u in users]})


@login_required
@require_GET
def suggested_users(request):
    users = User.objects.filter(is_active=True).exclude(pk=request.user.pk).order_by('-date_joined')[:10]
    return JsonResponse({"results": [profile_summary(u) for u in users]})


@login_required
@require_GET
def mention_suggestions(request):
    query = (request.GET.get('q') or '').strip().lstrip('@')
    users = User.objects.filter(is_active=True, username__istartswith=query).order_by('username')[:5]
    return JsonResponse({"results": [profile_summary(u) for u in users]})


@require_GET
def user_posts(request, username):
    user = get_object_or_404(User, username=username)
    qs = Post.objects.filter(user=user, status='published').select_related('user')
    return JsonResponse(paginate(request, qs, post_summary, settings.POSTS_PER_PAGE))


@require_GET
def recent_activity(request, username):
    user = get_object_or_404(User, username=username)
    items = []

    for post in Post.objects.filter(user=user, status='published').order_by('-created_at')[:3]:
        items.append(("post", post.created_at, f'Published "{post.title}"', post.id))

    for comment in Comment.objects.filter(user=user).select_related('post').order_by('-created_at')[:3]:
        title = comment.post.title if comment.post and comment.post.title else 'a post'
        items.append(("comment", comment.created_at, f'Commented on "{title}"', comment.post_id))

    for follow in Follow.objects.filter(follower=user).select_related('following').order_by('-created_at')[:3]:
        name = follow.following.display_name or 'someone'
        items.append(("follow", follow.created_at, f"Started following {name}", None))

    for earned in UserBadge.objects.filter(user=user).select_related('badge').order_by('-earned_at')[:3]:
        items.append(("badge", earned.earned_at, f'Earned the "{earned.badge.name}" badge', None))

    items.sort(key=lambda item: item[1], reverse=True)
    return JsonResponse({"results": [
        {"type": kind, "created_at": at.isoformat(), "description": text, "post_id": post_id}
        for kind, at, text, post_id in items[:5]
    ]})


# ============================================================================
# SECTION 3: POSTS, DRAFTS & FEED
# ============================================================================

def _clean_post_fields(data, post=None):
    """Normalized post fields from a request payload, keeping existing values."""
    post_type = text_field(data, 'type') or (post.type if post else 'article')
    if post_type not in POST_TYPES:
        raise ValueError("Invalid content type")

    category = text_field(data, 'category', post.category if post else '')
    if category and category not in CATEGORY_IDS:
        raise ValueError("Invalid category")

    tags = data.get('tags', post.tags if post else [])
    if tags is None:
        tags = []
    elif isinstance(tags, str):
        tags = tags.split(',')
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValueError("tags must be a list of strings")
    tags = [t.strip() for t in tags if t.strip()]

    video_url = text_field(data, 'video_url', post.video_url if post else '')
    return {
        "type": post_type,
        "title": text_field(data, 'title', post.title if post else ''),
        "content": text_field(data, 'content', post.content if post else ''),
        "tags": tags,
        "category": category,
        "video_url": video_url if post_type == 'video' else '',
    }


def _apply(post, fields):
    for name, value in fields.items():
        setattr(post, name, value)


def _publish_checks(fields):
    if not fields["title"]:
        return "Title required"
    if not fields["content"]:
        return "Content required"
    if not fields["tags"]:
        return "Please select at least one tag"
    return None


@require_http_methods(["GET", "POST"])
def posts(request):
    """GET lists the feed, POST publishes a new post."""
    if request.method == "GET":
        return feed(request)
    if not request.user.is_authenticated:
        return error("Authentication required", status=401)

    try:
        fields = _clean_post_fields(json_body(request))
    except ValueError as e:
        return error(str(e))
    problem = _publish_checks(fields)
    if problem:
        return error(problem)

    post = Post.objects.create(user=request.user, status='published', **fields)
    notify_mentions(post.content, request.user, post=post)
    earned = check_and_award_badges(request.user)
    return JsonResponse({
        "post": post_summary(post, include_content=True),
        "badges_earned": [badge_data(b) for b in earned],
    }, status=201)


@require_GET
def feed(request):
    tab = request.GET.get('tab', 'posts')
    category = request.GET.get('category', 'all')
    sort = request.GET.get('sort', 'recent')
    mode = request.GET.get('mode', 'all')
    query = (request.GET.get('q') or '').strip()

    qs = Post.objects.filter(status='published').select_related('user')
    if tab in TAB_TYPES:
        qs = qs.filter(type=TAB_TYPES[tab])
    if category and category != 'all':
        qs = qs.filter(category=category)
    if query:
        qs = qs.filter(Q(title__icontains=query) | Q(content__icontains=query))

    if not request.user.is_authenticated:
        mode = "all"

    if mode == "following":
        qs = qs.filter(user__followers__follower=request.user)
    elif mode == 'recommended':
        try:
            ids = recommend_post_ids(request.user.id)
        except GatewayError as e:
            logger.warning(f"Recommendations unavailable for user {request.user.id}: {e}")
            ids = None
        if ids is not None:
            ids = [int(i) for i in ids if str(i).isdigit()]
            ordering = Case(
                *[When(id=pk, then=pos) for pos, pk in enumerate(ids)],
                output_field=IntegerField(),
            )
            qs = qs.filter(id__in=ids).order_by(ordering) if ids else qs.none()
            return JsonResponse(paginate(request, qs, post_summary, settings.POSTS_PER_PAGE))
        sort = 'popular'

    if sort == 'popular':
        qs = qs.order_by('-likes_count', '-created_at')
    else:
        qs = qs.order_by('-created_at')
    return JsonResponse(paginate(request, qs, post_summary, settings.POSTS_PER_PAGE))


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
def post_detail(request, post_id):
    if request.method != "GET":
        if not request.user.is_authenticated:
            return error("Authentication required", status=401)
        return _modify_post(request, post_id)

    post = get_object_or_404(Post.objects.select_related('user'), id=post_id)
    is_owner = request.user.is_authenticated and request.user.pk == post.user_id
    if post.status != 'published' and not is_owner:
        return error("Post not found", status=404)

    if post.status == 'published':
        Post.increment(post.id, 'views_count')
        post.refresh_from_db(fields=['views_count'])
        if request.user.is_authenticated:
            _track_read(request.user, post)

    data = post_summary(post, include_content=True)
    data["content_html"] = render_mentions(post.content)
    data["is_liked"] = (
        request.user.is_authenticated
        and Like.objects.filter(user=request.user, post=post).exists()
    )
    return JsonResponse(data)


def _modify_post(request, post_id):
    post = get_object_or_404(Post, id=post_id, user=request.user)

    if request.method == "DELETE":
        post.delete()
        logger.info(f"Post {post_id} deleted by {request.user.username}")
        return JsonResponse({"message": "Post deleted"})

    try:
        fields = _clean_post_fields(json_body(request), post)
    except ValueError as e:
        return error(str(e))
    if post.status == 'published':
        problem = _publish_checks(fields)
        if problem:
            return error(problem)
    elif not fields["title"] and not fields["content"]:
        return error("Please add a title or content before saving")

    _apply(post, fields)
    post.save()
    return JsonResponse({"post": post_summary(post, include_content=True)})


@login_required
@require_http_methods(["GET", "POST"])
def drafts(request):
    """GET lists own drafts, POST creates or updates one (pass "id" to update)."""
    if request.method == "GET":
        qs = Post.objects.filter(user=request.user, status='draft').select_related('user').order_by('-updated_at')
        return JsonResponse({"results": [post_summary(p, include_content=True) for p in qs]})

    data = json_body(request)
    post = None
    draft_id = int_field(data, 'id')
    if draft_id:
        post = get_object_or_404(Post, id=draft_id, user=request.user, status='draft')
    try:
        fields = _clean_post_fields(data, post)
    except ValueError as e:
        return error(str(e))
    if not fields["title"] and not fields["content"]:
        return error("Please add a title or content before saving")
    fields["title"] = fields["title"] or 'Untitled Draft'

    if post is None:
        post = Post.objects.create(user=request.user, status='draft', **fields)
        status = 201
    else:
        _apply(post, fields)
        post.save()
        status = 200
    return JsonResponse({"post": post_summary(post, include_content=True)}, status=status)


@login_required
@require_POST
def publish_draft(request, post_id):
    post = get_object_or_404(Post, id=post_id, user=request.user, status='draft')
    try:
        fields = _clean_post_fields(json_body(request), post)
    except ValueError as e:
        return error(str(e))
    problem = _publish_checks(fields)
    if problem:
        return error(problem)

    _apply(post, fields)
    post.status = 'published'
    post.save()
    notify_mentions(post.content, request.user, post=post)
    earned = check_and_award_badges(request.user)
    return JsonResponse({
        "post": post_summary(post, include_content=True),
        "badges_earned": [badge_data(b) for b in earned],
    })


# ============================================================================
# SECTION 4: LIKES
# ============================================================================

@login_required
@require_http_methods(["GET", "POST"])
def toggle_like(request, post_id):
    post = get_object_or_404(Post, id=post_id, status='published')

    if request.method == "GET":
        liked = Like.objects.filter(user=request.user, post=post).exists()
        return JsonResponse({"liked": liked, "likes_count": post.likes_count})

    with transaction.atomic():
        like, created = Like.objects.get_or_create(user=request.user, post=post)
        if created:
            Post.increment(post.id, 'likes_count')
        else:
            like.delete()
            Post.decrement(post.id, 'likes_count')

    if created:
        notify(post.user, request.user, 'like', post=post)
        check_and_award_badges(post.user)

    post.refresh_from_db(fields=['likes_count'])
    return JsonResponse({"liked": created, "likes_count": post.likes_count})


@login_required
@require_POST
def toggle_comment_like(request, comment_id):
    comment = get_object_or_404(Comment, id=comment_id)
    with transaction.atomic():
        like, created = Like.objects.get_or_create(user=request.user, comment=comment)
        if created:
            Comment.increment(comment.id, 'likes_count')
        else:
            like.delete()
            Comment.decrement(comment.id, 'likes_count')
    comment.refresh_from_db(fields=['likes_count'])
    return JsonResponse({"liked": created, "likes_count": comment.likes_count})


# ============================================================================
# SECTION 5: COMMENTS
# ============================================================================

@require_http_methods(["GET", "POST"])
def comments(request, post_id):
    post = get_object_or_404(Post, id=post_id, status='published')

    if request.method == "GET":
        qs = Comment.objects.filter(post=post).select_related('user').order_by('created_at')
        return JsonResponse({"results": [comment_data(c) for c in qs]})

    if not request.user.is_authenticated:
        return error("Authentication required", status=401)

    content = text_field(json_body(request), 'content')
    if not content:
        return error("Comment cannot be empty")

    comment = Comment.objects.create(post=post, user=request.user, content=content)
    Post.increment(post.id, 'comments_count')

    notify(post.user, request.user, 'comment', post=post, comment=comment)
    notify_mentions(content, request.user, post=post, comment=comment)
    check_and_award_badges(request.user)
    return JsonResponse({"comment": comment_data(comment)}, status=201)


@login_required
@require_http_methods(["DELETE", "POST"])
def delete_comment(request, comment_id):
    comment = get_object_or_404(Comment, id=comment_id, user=request.user)
    post_id = comment.post_id
    comment.delete()
    Post.decrement(post_id, 'comments_count')
    return JsonResponse({"message": "Comment deleted"})


# ============================================================================
# SECTION 6: FOLLOWS
# ============================================================================

def _follow_counts(user):
    return {
        "followers": user.followers.count(),
        "following": user.following.count(),
    }


@login_required
@require_http_methods(["GET", "POST", "DELETE"])
def follow(request, username):
    """GET checks, POST follows, DELETE unfollows."""
    target = get_object_or_404(User, username=username)

    if request.method == "GET":
        following = Follow.objects.filter(follower=request.user, following=target).exists()
        return JsonResponse({"is_following": following, **_follow_counts(target)})

    if target.pk == request.user.pk:
        return error("Cannot follow yourself")

    if request.method == "POST":
        _, created = Follow.objects.get_or_create(follower=request.user, following=target)
        if created:
            _after_follow(request.user, target)
        return JsonResponse({"is_following": True, **_follow_counts(target)})

    Follow.objects.filter(follower=request.user, following=target).delete()
    return JsonResponse({"is_following": False, **_follow_counts(target)})


@login_required
@require_POST
def toggle_follow(request, username):
    target = get_object_or_404(User, username=username)
    if target.pk == request.user.pk:
        return error("Cannot follow yourself")

    follow_row, created = Follow.objects.get_or_create(follower=request.user, following=target)
    if created:
        action = "followed"
        _after_follow(request.user, target)
    else:
        follow_row.delete()
        action = "unfollowed"

    return JsonResponse({"action": action, "is_following": created, **_follow_counts(target)})


def _after_follow(follower, target):
    notify(target, follower, 'follow')
    check_and_award_badges(follower)
    check_and_award_badges(target)


@require_GET
def followers_list(request, username):
    user = get_object_or_404(User, username=username)
    rows = Follow.objects.filter(following=user).select_related('follower')
    return JsonResponse({"results": [profile_summary(f.follower) for f in rows]})


@require_GET
def following_list(request, username):
    user = get_object_or_404(User, username=username)
    rows = Follow.objects.filter(follower=user).select_related('following')
    return JsonResponse({"results": [profile_summary(f.following) for f in rows]})


# ============================================================================
# SECTION 7: READING HISTORY
# ============================================================================

def _track_read(user, post):
    ReadingHistory.objects.update_or_create(
        user=user, post=post, defaults={"read_at": timezone.now()}
    )


@login_required
@require_POST
def track_read(request, post_id):
    post = get_object_or_404(Post, id=post_id, status='published')
    _track_read(request.user, post)
    return JsonResponse({"message": "Read tracked"})


@login_required
@require_http_methods(["GET", "DELETE"])
def reading_history(request):
    if request.method == "DELETE":
        deleted, _ = ReadingHistory.objects.filter(user=request.user).delete()
        return JsonResponse({"message": "History cleared", "deleted": deleted})

    rows = (
        ReadingHistory.objects.filter(user=request.user)
        .select_related('post', 'post__user')
        .order_by('-read_at')[:50]
    )
    return JsonResponse({"results": [
        {"id": r.id, "read_at": r.read_at.isoformat(), "post": post_summary(r.post)}
        for r in rows if r.post is not None
    ]})


@login_required
@require_http_methods(["DELETE", "POST"])
def remove_from_history(request, post_id):
    ReadingHistory.objects.filter(user=request.user, post_id=post_id).delete()
    return JsonResponse({"message": "Removed from history"})


# ============================================================================
# SECTION 8: ACHIEVEMENTS & LEADERBOARD
# ============================================================================

@login_required
@require_GET
def achievements_view(request):
    return JsonResponse(achievements(request.user))


@require_GET
def user_badges(request, username):
    user = get_object_or_404(User, username=username)
    rows = UserBadge.objects.filter(user=user).select_related('badge').order_by('-earned_at')
    return JsonResponse({"results": [
        {**badge_data(ub.badge), "earned_at": ub.earned_at.isoformat()}
        for ub in rows
    ]})


@require_GET
def leaderboard(request):
    return JsonResponse({
        "badge_leaders": [
            {"user": profile_summary(u), "badge_count": n}
            for u, n in badge_leaders()
        ],
        "activity_leaders": [
            {**row, "user": profile_summary(row["user"])}
            for row in activity_leaders()
        ],
    })
