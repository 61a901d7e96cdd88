"""
================================================================================
BASIC COMET - THIRD-PARTY AI CLIENTS
================================================================================

@file        ai.py
@description HTTP clients for the LLM gateway and the speech-to-text API
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
1. Recommendation scoring
   - build_interest_profile(): tags/categories/types from likes and reads
   - request_recommendations(): chat-completions call, returns raw reply text
   - parse_recommended_ids(): first JSON array in the reply
   - fallback_ranking(): followed authors first, then most liked

2. Voice note transcription
   - transcribe_audio(): forwards an uploaded file, returns {text, words}

ERROR HANDLING
================================================================================
Upstream failures raise GatewayError / TranscriptionError carrying the HTTP
status the edge view should answer with. Rate limiting (429) and exhausted
credits (402) are passed through; everything else becomes 500.

================================================================================
"""

import json
import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

JSON_ARRAY_RE = re.compile(r'\[[\s\S]*\]')

RECOMMENDATION_SYSTEM_PROMPT = """You are a content recommendation engine. Based on the user's interests and available posts, recommend the best matching posts.

Return ONLY a JSON array of post IDs in order of relevance (most relevant first). Return between 5-15 post IDs.
Example: [12, 7, 31]

Consider:
- Tag overlap with user interests
- Category preferences
- Content type preferences
- Posts from followed users get a boost
- Higher liked posts indicate quality"""


class GatewayError(Exception):
    """LLM gateway call failed. ``status`` is the HTTP status to answer with."""

    def __init__(self, message, status=500):
        super().__init__(message)
        self.status = status


class TranscriptionError(Exception):
    def __init__(self, message, status=500):
        super().__init__(message)
        self.status = status


# ============================================================================
# RECOMMENDATIONS
# ============================================================================

def _unique(values):
    seen = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen


def build_interest_profile(liked_posts, read_posts, followed_count):
    """
    Summarize what a user engages with.

    Args:
        liked_posts / read_posts: Post instances, newest interaction first
        followed_count: Number of users followed
    """
    engaged = list(liked_posts) + list(read_posts)
    return {
        "likedTags": _unique(t for p in liked_posts for t in (p.tags or []))[:15],
        "readTags": _unique(t for p in read_posts for t in (p.tags or []))[:15],
        "preferredCategories": _unique(p.category for p in engaged)[:5],
        "preferredTypes": _unique(p.type for p in engaged),
        "followedUserCount": followed_count,
    }


def candidate_payload(posts, followed_ids):
    return [
        {
            "id": p.id,
            "title": p.title,
            "tags": p.tags or [],
            "category": p.category,
            "type": p.type,
            "likes": p.likes_count,
            "fromFollowed": p.user_id in followed_ids,
        }
        for p in posts
    ]


def request_recommendations(profile, candidates):
    """
    Ask the gateway to rank candidates. Returns the assistant reply text.

    Raises:
        GatewayError: Missing key, transport failure, non-2xx or malformed answer
    """
    api_key = settings.AI_GATEWAY_API_KEY
    if not api_key:
        raise GatewayError("AI_GATEWAY_API_KEY is not configured")

    user_prompt = (
        f"User Profile:\n{json.dumps(profile, indent=2)}\n\n"
        f"Available Posts:\n{json.dumps(candidates, indent=2)}\n\n"
        "Return the recommended post IDs as a JSON array."
    )
    body = {
        "model": settings.AI_GATEWAY_MODEL,
        "messages": [
            {"role": "system", "content": RECOMMENDATION_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": 0.3,
    }

    try:
        response = requests.post(
            settings.AI_GATEWAY_URL,
            json=body,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=settings.AI_GATEWAY_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"AI gateway unreachable: {e}")
        raise GatewayError(f"AI request failed: {e}") from e

    if response.status_code == 429:
        logger.warning("AI gateway rate limit exceeded")
        raise GatewayError("Rate limit exceeded, please try again later", status=429)
    if response.status_code == 402:
        logger.warning("AI gateway payment required")
        raise GatewayError("AI service unavailable", status=402)
    if not response.ok:
        raise GatewayError(f"AI request failed: {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        logger.error(f"AI gateway returned invalid JSON: {e}")
        raise GatewayError("AI gateway returned a malformed response") from e
    if not isinstance(data, dict):
        raise GatewayError("AI gateway returned a malformed response")

    choices = data.get("choices")
    first = choices[0] if isinstance(choices, list) and choices else {}
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) and content else "[]"


def parse_recommended_ids(reply):
    """
    First JSON array found in the reply.

    Raises:
        ValueError: No array, or the array is not valid JSON
    """
    match = JSON_ARRAY_RE.search(reply or '')
    if not match:
        raise ValueError("No JSON array in AI response")
    ids = json.loads(match.group(0))
    if not isinstance(ids, list):
        raise ValueError("AI response is not a list")
    return ids


def fallback_ranking(posts, followed_ids, limit=15):
    ranked = sorted(
        posts,
        key=lambda p: (p.user_id in followed_ids, p.likes_count),
        reverse=True,
    )
    return [p.id for p in ranked[:limit]]


# ============================================================================
# TRANSCRIPTION
# ============================================================================

def transcribe_audio(audio_file):
    """
    Send an uploaded audio file to the speech-to-text API.

    Returns:
        dict: {"text": str, "words": list}
    """
    api_key = settings.ELEVENLABS_API_KEY
    if not api_key:
        raise TranscriptionError("ELEVENLABS_API_KEY is not configured")

    logger.info(f"Transcribing {audio_file.name} ({audio_file.size} bytes)")
    files = {
        "file": (audio_file.name, audio_file.read(), audio_file.content_type or "application/octet-stream"),
    }
    try:
        response = requests.post(
            settings.ELEVENLABS_STT_URL,
            headers={"xi-api-key": api_key},
            data={"model_id": settings.ELEVENLABS_MODEL_ID},
            files=files,
            timeout=settings.ELEVENLABS_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Speech-to-text API unreachable: {e}")
        raise TranscriptionError(f"Transcription failed: {e}") from e

    if not response.ok:
        logger.error(f"Speech-to-text API error: {response.status_code} {response.text}")
        raise TranscriptionError(f"Transcription failed: {response.status_code}")

    try:
        transcription = response.json()
    except ValueError as e:
        logger.error(f"Speech-to-text API returned invalid JSON: {e}")
        raise TranscriptionError("Transcription failed: invalid response") from e
    return {"text": transcription.get("text"), "words": transcription.get("words")}
