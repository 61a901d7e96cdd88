"""
================================================================================
BASIC COMET - URL CONFIGURATION
================================================================================

@file        urls.py
@description JSON API routing for Basic Comet
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

URL STRUCTURE OVERVIEW
================================================================================
1. Authentication (csrf, register, login, logout, me)
2. Profiles & Discovery (profile, edit, search, suggestions)
3. Posts, Feed & Drafts
4. Likes & Comments
5. Follows
6. Reading History
7. Achievements & Leaderboard
8. Notifications & Real-time Events
9. Messaging (direct conversations, attachments, typing, group chats)
10. Groups
11. Ebooks
12. Edge Functions (recommendations, voice note transcription)

Everything except the edge functions lives under ``api/v1/``.

NAMING CONVENTIONS
================================================================================
- Resource actions: <resource>_<action> (e.g. 'publish_draft', 'delete_comment')
- Toggles: prefixed with 'toggle_' (e.g. 'toggle_like', 'toggle_follow')

================================================================================
"""

from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path

from . import edge_views, ebook_views, group_views, messaging_views, notification_views, views


# ============================================================================
# URL PATTERNS DEFINITION
# ============================================================================

api_patterns = [

    # ========================================================================
    # SECTION 1: AUTHENTICATION
    # ========================================================================

    path("auth/csrf", views.csrf, name="csrf"),
    path("auth/register", views.register, name="register"),
    path("auth/login", views.login_view, name="login"),
    path("auth/logout", views.logout_view, name="logout"),
    path("auth/me", views.me, name="me"),


    # ========================================================================
    # SECTION 2: PROFILES & DISCOVERY
    # ========================================================================

    path("profile/edit", views.edit_profile, name="edit_profile"),
    path("profile/completion", views.profile_completion, name="profile_completion"),
    path("profiles/<str:username>", views.profile, name="profile"),
    path("profiles/<str:username>/posts", views.user_posts, name="user_posts"),
    path("profiles/<str:username>/activity", views.recent_activity, name="recent_activity"),
    path("users/search", views.users_search, name="users_search"),
    path("users/suggested", views.suggested_users, name="suggested_users"),
    path("mentions/users", views.mention_suggestions, name="mention_suggestions"),


    # ========================================================================
    # SECTION 3: POSTS, FEED & DRAFTS
    # ========================================================================

    path("posts", views.posts, name="posts"),
    path("feed", views.feed, name="feed"),
    path("posts/<int:post_id>", views.post_detail, name="post_detail"),
    path("drafts", views.drafts, name="drafts"),
    path("drafts/<int:post_id>/publish", views.publish_draft, name="publish_draft"),


    # ========================================================================
    # SECTION 4: LIKES & COMMENTS
    # ========================================================================

    path("posts/<int:post_id>/like", views.toggle_like, name="toggle_like"),
    path("posts/<int:post_id>/comments", views.comments, name="comments"),
    path("comments/<int:comment_id>/like", views.toggle_comment_like, name="toggle_comment_like"),
    path("comments/<int:comment_id>", views.delete_comment, name="delete_comment"),


    # ========================================================================
    # SECTION 5: FOLLOWS
    # ========================================================================

    path("follow/<str:username>", views.follow, name="follow"),
    path("follow/<str:username>/toggle", views.toggle_follow, name="toggle_follow"),
    path("profiles/<str:username>/followers", views.followers_list, name="followers_list"),
    path("profiles/<str:username>/following", views.following_list, name="following_list"),


    # ========================================================================
    # SECTION 6: READING HISTORY
    # ========================================================================

    path("posts/<int:post_id>/read", views.track_read, name="track_read"),
    path("reading-history", views.reading_history, name="reading_history"),
    path("reading-history/<int:post_id>", views.remove_from_history, name="remove_from_history"),


    # ========================================================================
    # SECTION 7: ACHIEVEMENTS & LEADERBOARD
    # ========================================================================

    path("achievements", views.achievements_view, name="achievements"),
    path("profiles/<str:username>/badges", views.user_badges, name="user_badges"),
    path("leaderboard", views.leaderboard, name="leaderboard"),


    # ========================================================================
    # SECTION 8: NOTIFICATIONS & REAL-TIME EVENTS
    # ========================================================================

    path("notifications", notification_views.notifications_view, name="notifications"),
    path("notifications/unread-count", notification_views.unread_count, name="unread_count"),
    path("notifications/read-all", notification_views.mark_all_notifications_read, name="mark_all_notifications_read"),
    path("notifications/preferences", notification_views.notification_preferences, name="notification_preferences"),
    path("notifications/<int:notification_id>/read", notification_views.mark_notification_read, name="mark_notification_read"),
    path("notifications/<int:notification_id>", notification_views.delete_notification, name="delete_notification"),
    path("realtime/events", notification_views.realtime_events, name="realtime_events"),
    path("unread-counts", notification_views.unread_counts_view, name="unread_counts"),


    # ========================================================================
    # SECTION 9: MESSAGING
    # ========================================================================

    path("conversations", messaging_views.conversations, name="conversations"),
    path("conversations/<int:conversation_id>/messages", messaging_views.conversation_messages, name="conversation_messages"),
    path("conversations/<int:conversation_id>/read", messaging_views.mark_conversation_read, name="mark_conversation_read"),
    path("conversations/<int:conversation_id>/typing", messaging_views.typing, name="typing"),
    path("attachments", messaging_views.upload_attachment, name="upload_attachment"),
    path("group-chats", messaging_views.group_chats, name="group_chats"),
    path("group-chats/<int:conversation_id>", messaging_views.update_group_chat, name="update_group_chat"),
    path("group-chats/<int:conversation_id>/members", messaging_views.add_group_chat_member, name="add_group_chat_member"),
    path("group-chats/<int:conversation_id>/members/<int:user_id>", messaging_views.remove_group_chat_member, name="remove_group_chat_member"),
    path("group-chats/<int:conversation_id>/leave", messaging_views.leave_group_chat, name="leave_group_chat"),


    # ========================================================================
    # SECTION 10: GROUPS
    # ========================================================================

    path("groups", group_views.groups, name="groups"),
    path("groups/mine", group_views.my_groups, name="my_groups"),
    path("groups/<int:group_id>", group_views.group_detail, name="group_detail"),
    path("groups/<int:group_id>/join", group_views.join_group, name="join_group"),
    path("groups/<int:group_id>/leave", group_views.leave_group, name="leave_group"),
    path("groups/<int:group_id>/members", group_views.group_members, name="group_members"),
    path("groups/<int:group_id>/posts", group_views.group_posts, name="group_posts"),
    path("group-posts/<int:post_id>/like", group_views.toggle_group_post_like, name="toggle_group_post_like"),
    path("group-posts/<int:post_id>/comments", group_views.group_post_comments, name="group_post_comments"),
    path("group-comments/<int:comment_id>", group_views.delete_group_comment, name="delete_group_comment"),


    # ========================================================================
    # SECTION 11: EBOOKS
    # ========================================================================

    path("ebooks", ebook_views.ebooks, name="ebooks"),
    path("ebooks/mine", ebook_views.my_ebooks, name="my_ebooks"),
    path("ebooks/bookmarked", ebook_views.bookmarked_ebooks, name="bookmarked_ebooks"),
    path("ebooks/<int:ebook_id>", ebook_views.ebook_detail, name="ebook_detail"),
    path("ebooks/<int:ebook_id>/chapters", ebook_views.add_chapter, name="add_chapter"),
    path("ebooks/<int:ebook_id>/reviews", ebook_views.ebook_reviews, name="ebook_reviews"),
    path("ebooks/<int:ebook_id>/like", ebook_views.toggle_ebook_like, name="toggle_ebook_like"),
    path("ebooks/<int:ebook_id>/bookmark", ebook_views.toggle_ebook_bookmark, name="toggle_ebook_bookmark"),
    path("chapters/<int:chapter_id>", ebook_views.chapter_detail, name="chapter_detail"),
    path("reviews/<int:review_id>", ebook_views.delete_review, name="delete_review"),
]


urlpatterns = [
    path("api/v1/", include(api_patterns)),

    # ========================================================================
    # SECTION 12: EDGE FUNCTIONS
    # ========================================================================

    path("functions/get-recommendations", edge_views.get_recommendations, name="get_recommendations"),
    path("functions/transcribe-voice-note", edge_views.transcribe_voice_note, name="transcribe_voice_note"),
]


# ============================================================================
# DEVELOPMENT MEDIA SERVING
# ============================================================================

if settings.DEBUG and getattr(settings, 'MEDIA_URL', None):
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
