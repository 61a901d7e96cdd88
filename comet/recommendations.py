"""
"For You" recommendations: gathers a user's activity and asks the LLM
gateway to rank unseen posts.
"""

import logging

from .ai import (
    build_interest_profile,
    candidate_payload,
    fallback_ranking,
    parse_recommended_ids,
    request_recommendations,
)
from .models import Follow, Like, Post, ReadingHistory

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20
CANDIDATE_POOL = 100
CANDIDATES_SENT = 50


def recommend_post_ids(user_id):
    """
    Ranked ids of posts the user has not liked or read yet.

    Raises:
        GatewayError: The gateway refused or failed (see ai.py)
    """
    likes = list(
        Like.objects.filter(user_id=user_id, post__isnull=False)
        .select_related('post').order_by('-created_at')[:HISTORY_LIMIT]
    )
    reads = list(
        ReadingHistory.objects.filter(user_id=user_id)
        .select_related('post').order_by('-read_at')[:HISTORY_LIMIT]
    )
    followed_ids = set(Follow.objects.filter(follower_id=user_id).values_list('following_id', flat=True))
    available = list(
        Post.objects.filter(status='published').exclude(user_id=user_id)
        .order_by('-created_at')[:CANDIDATE_POOL]
    )

    seen = {l.post_id for l in likes} | {r.post_id for r in reads}
    unseen = [p for p in available if p.id not in seen]
    if not unseen:
        return []

    profile = build_interest_profile(
        [l.post for l in likes],
        [r.post for r in reads],
        len(followed_ids),
    )
    reply = request_recommendations(profile, candidate_payload(unseen[:CANDIDATES_SENT], followed_ids))

    try:
        ids = parse_recommended_ids(reply)
    except ValueError as e:
        logger.warning(f"Could not parse AI recommendations for user {user_id}: {e}")
        ids = fallback_ranking(unseen, followed_ids)

    logger.info(f"Recommended ids for user {user_id}: {ids}")
    return ids
