"""
Plain dict builders used by the JSON views.
"""


def _iso(dt):
    return dt.isoformat() if dt else None


def _file_url(value):
    if not value:
        return None
    try:
        return value.url
    except ValueError:
        return None


def profile_summary(user):
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name or user.username,
        "avatar_url": _file_url(user.avatar),
    }


def profile_detail(user):
    data = profile_summary(user)
    data.update({
        "bio": user.bio,
        "cover_url": _file_url(user.cover),
        "location": user.location,
        "website": user.website,
        "twitter": user.twitter,
        "github": user.github,
        "linkedin": user.linkedin,
        "timezone": user.timezone,
        "is_online": user.is_online,
        "last_seen": _iso(user.last_seen),
        "date_joined": _iso(user.date_joined),
    })
    return data


def post_summary(post, include_content=False):
    data = {
        "id": post.id,
        "type": post.type,
        "title": post.title,
        "excerpt": post.content[:200],
        "status": post.status,
        "tags": post.tags or [],
        "category": post.category,
        "video_url": post.video_url or None,
        "likes_count": post.likes_count,
        "comments_count": post.comments_count,
        "views_count": post.views_count,
        "created_at": _iso(post.created_at),
        "updated_at": _iso(post.updated_at),
        "author": profile_summary(post.user),
    }
    if include_content:
        data["content"] = post.content
    return data


def comment_data(comment):
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "content": comment.content,
        "likes_count": comment.likes_count,
        "created_at": _iso(comment.created_at),
        "author": profile_summary(comment.user),
    }


def badge_data(badge):
    return {
        "id": badge.id,
        "name": badge.name,
        "description": badge.description,
        "icon": badge.icon,
        "criteria_type": badge.criteria_type,
        "criteria_value": badge.criteria_value,
    }


def message_data(message):
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "content": message.content,
        "attachment_url": message.attachment_url or None,
        "attachment_type": message.attachment_type or None,
        "attachment_name": message.attachment_name or None,
        "created_at": _iso(message.created_at),
        "sender": profile_summary(message.sender),
    }


def group_data(group):
    return {
        "id": group.id,
        "name": group.name,
        "description": group.description,
        "avatar_url": _file_url(group.avatar),
        "cover_url": _file_url(group.cover),
        "privacy": group.privacy,
        "members_count": group.members_count,
        "posts_count": group.posts_count,
        "created_at": _iso(group.created_at),
        "updated_at": _iso(group.updated_at),
        "creator": profile_summary(group.creator),
    }


def group_post_data(post):
    return {
        "id": post.id,
        "group_id": post.group_id,
        "title": post.title,
        "content": post.content,
        "likes_count": post.likes_count,
        "comments_count": post.comments_count,
        "created_at": _iso(post.created_at),
        "author": profile_summary(post.user),
    }


def group_comment_data(comment):
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "content": comment.content,
        "created_at": _iso(comment.created_at),
        "author": profile_summary(comment.user),
    }


def ebook_data(ebook, chapters_count=None):
    data = {
        "id": ebook.id,
        "title": ebook.title,
        "description": ebook.description,
        "cover_url": _file_url(ebook.cover),
        "genre": ebook.genre,
        "status": ebook.status,
        "views_count": ebook.views_count,
        "likes_count": ebook.likes_count,
        "reviews_count": ebook.reviews_count,
        "average_rating": float(ebook.average_rating),
        "created_at": _iso(ebook.created_at),
        "updated_at": _iso(ebook.updated_at),
        "author": profile_summary(ebook.user),
    }
    if chapters_count is not None:
        data["chapters_count"] = chapters_count
    return data


def chapter_data(chapter, include_content=True):
    data = {
        "id": chapter.id,
        "title": chapter.title,
        "chapter_order": chapter.chapter_order,
        "created_at": _iso(chapter.created_at),
    }
    if include_content:
        data["content"] = chapter.content
    return data


def review_data(review):
    return {
        "id": review.id,
        "rating": review.rating,
        "content": review.content,
        "created_at": _iso(review.created_at),
        "author": profile_summary(review.user),
    }
