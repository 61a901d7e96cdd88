"""
================================================================================
BASIC COMET - BADGE EVALUATION
================================================================================

@file        badges.py
@description User statistics, badge progress, awarding and leaderboards
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
A badge is earned once the statistic named by its criteria_type reaches
criteria_value. Statistics are computed from live rows:

    posts           published posts authored
    likes_received  sum of likes_count over all of the user's posts
    comments        comments written
    following       users followed
    followers       followers gained

check_and_award_badges() is idempotent: a (user, badge) pair is inserted at
most once thanks to the UserBadge unique constraint, and every new award
creates a 'badge' notification. Views call it after publishing, liking,
commenting and following.

================================================================================
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Sum

from .models import BADGE_CRITERIA_CHOICES, Badge, Comment, Follow, Post, User, UserBadge
from .notifications import notify

logger = logging.getLogger(__name__)

CRITERIA_LABELS = dict(BADGE_CRITERIA_CHOICES)

# Installed by `manage.py seed_badges`
# (name, description, icon, criteria_type, criteria_value)
DEFAULT_BADGES = [
    ("First Post", "Publish your first post", "pencil", "posts", 1),
    ("Prolific Writer", "Publish 10 posts", "book-open", "posts", 10),
    ("Content Creator", "Publish 50 posts", "crown", "posts", 50),
    ("Rising Star", "Receive 10 likes", "star", "likes_received", 10),
    ("Popular", "Receive 100 likes", "heart", "likes_received", 100),
    ("Superstar", "Receive 1000 likes", "trophy", "likes_received", 1000),
    ("Conversationalist", "Write 10 comments", "message-circle", "comments", 10),
    ("Social Butterfly", "Follow 10 users", "users", "following", 10),
    ("Influencer", "Gain 10 followers", "user-plus", "followers", 10),
    ("Community Leader", "Gain 100 followers", "award", "followers", 100),
]


def user_stats(user):
    likes = Post.objects.filter(user=user).aggregate(total=Sum('likes_count'))['total']
    return {
        "posts": Post.objects.filter(user=user, status='published').count(),
        "likes_received": likes or 0,
        "comments": Comment.objects.filter(user=user).count(),
        "following": Follow.objects.filter(follower=user).count(),
        "followers": Follow.objects.filter(following=user).count(),
    }


def badge_progress(criteria_type, criteria_value, stats):
    """Percentage towards a badge, capped at 100."""
    current = stats.get(criteria_type, 0)
    if criteria_value <= 0:
        return 100
    return min(current / criteria_value * 100, 100)


def criteria_label(criteria_type):
    return CRITERIA_LABELS.get(criteria_type, criteria_type)


def check_and_award_badges(user):
    """
    Award every badge the user now qualifies for.

    Returns:
        list[Badge]: Badges earned by this call (empty when nothing changed)
    """
    stats = user_stats(user)
    earned_ids = set(UserBadge.objects.filter(user=user).values_list('badge_id', flat=True))

    awarded = []
    for badge in Badge.objects.exclude(id__in=earned_ids):
        if stats.get(badge.criteria_type, 0) < badge.criteria_value:
            continue
        try:
            with transaction.atomic():
                UserBadge.objects.create(user=user, badge=badge)
        except IntegrityError:
            # Awarded concurrently by another request
            continue
        notify(user, None, 'badge')
        logger.info(f"User {user.id} earned badge '{badge.name}'")
        awarded.append(badge)
    return awarded


def achievements(user):
    """Every badge with earned flag and progress, plus the user's stats."""
    stats = user_stats(user)
    earned = {
        ub.badge_id: ub.earned_at
        for ub in UserBadge.objects.filter(user=user)
    }
    badges = []
    for badge in Badge.objects.all():
        earned_at = earned.get(badge.id)
        badges.append({
            "id": badge.id,
            "name": badge.name,
            "description": badge.description,
            "icon": badge.icon,
            "criteria_type": badge.criteria_type,
            "criteria_value": badge.criteria_value,
            "criteria_label": criteria_label(badge.criteria_type),
            "current": stats.get(badge.criteria_type, 0),
            "progress": badge_progress(badge.criteria_type, badge.criteria_value, stats),
            "earned": earned_at is not None,
            "earned_at": earned_at.isoformat() if earned_at else None,
        })
    return {
        "stats": stats,
        "badges": badges,
        "earned_count": len(earned),
        "total_count": len(badges),
    }


# ============================================================================
# LEADERBOARDS
# ============================================================================

def badge_leaders(limit=10):
    users = (
        User.objects.annotate(badge_count=Count('badges'))
        .filter(badge_count__gt=0)
        .order_by('-badge_count', 'username')[:limit]
    )
    return [(u, u.badge_count) for u in users]


def activity_leaders(limit=10):
    """
    Ranked by posts * 10 + likes received + comments * 5.

    Every authored post counts here, drafts included.
    """
    posts = User.objects.annotate(
        n=Count('posts', distinct=True),
        likes_received=Sum('posts__likes_count'),
    ).values('id', 'n', 'likes_received')
    comments = dict(
        User.objects.annotate(n=Count('comments')).values_list('id', 'n')
    )

    scored = []
    for row in posts:
        n_comments = comments.get(row['id'], 0)
        likes = row['likes_received'] or 0
        score = row['n'] * 10 + likes + n_comments * 5
        if score > 0:
            scored.append((row['id'], score, row['n'], likes, n_comments))
    scored.sort(key=lambda r: -r[1])
    scored = scored[:limit]

    users = User.objects.in_bulk([r[0] for r in scored])
    return [
        {
            "user": users[user_id],
            "score": score,
            "posts": n_posts,
            "likes": likes,
            "comments": n_comments,
        }
        for user_id, score, n_posts, likes, n_comments in scored
    ]
