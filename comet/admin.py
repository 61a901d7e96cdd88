from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group as AuthGroup
from django.utils.html import format_html
from django.urls import reverse
from .models import (
    User, Post, Comment, Follow, Notification, Badge, UserBadge,
    Conversation, ConversationParticipant, Message,
    Group, GroupMember, GroupPost, GroupPostLike, GroupComment,
    Ebook, EbookChapter, EbookReview, EbookLike, EbookBookmark,
    Like, ReadingHistory,
)


def _short(text, limit):
    if text:
        return text[:limit] + '...' if len(text) > limit else text
    return "(no content)"


# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'display_name', 'email', 'is_staff', 'date_joined')
    search_fields = ('username', 'display_name', 'email')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': (
            'display_name', 'bio', 'avatar', 'cover', 'location', 'website',
            'twitter', 'github', 'linkedin', 'timezone', 'browser_notifications_enabled',
        )}),
    )
    actions = ['activate_users', 'deactivate_users']

    def activate_users(self, request, queryset):
        queryset.update(is_active=True)
        self.message_user(request, f"{queryset.count()} users activated")
    activate_users.short_description = "Activate selected users"

    def deactivate_users(self, request, queryset):
        queryset.update(is_active=False)
        self.message_user(request, f"{queryset.count()} users deactivated")
    deactivate_users.short_description = "Deactivate selected users"

@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'user_link', 'type', 'status', 'category', 'likes_count', 'created_at')
    list_filter = ('type', 'status', 'category')
    search_fields = ('title', 'content', 'user__username')

    def user_link(self, obj):
        url = reverse("admin:comet_user_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.username)
    user_link.short_description = 'User'
    user_link.admin_order_field = 'user__username'

@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'created_at', 'content_short')
    search_fields = ('content', 'user__username', 'post__id')

    def content_short(self, obj):
        return _short(obj.content, 50)
    content_short.short_description = 'Content'

@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('id', 'follower', 'following', 'created_at')
    search_fields = ('follower__username', 'following__username')

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'actor', 'type', 'created_at', 'is_read')
    list_filter = ('type', 'created_at')
    search_fields = ('user__username', 'actor__username')

    def is_read(self, obj):
        return obj.is_read
    is_read.boolean = True

@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ('name', 'icon', 'criteria_type', 'criteria_value', 'holder_count')
    list_filter = ('criteria_type',)

    def holder_count(self, obj):
        return obj.holders.count()
    holder_count.short_description = 'Holders'

@admin.register(UserBadge)
class UserBadgeAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'badge', 'earned_at')
    search_fields = ('user__username', 'badge__name')

@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_group', 'created_by', 'updated_at', 'member_count')
    list_filter = ('is_group', 'created_at')
    search_fields = ('name', 'created_by__username')

    def member_count(self, obj):
        return obj.participants.count()
    member_count.short_description = 'Members'

@admin.register(ConversationParticipant)
class ConversationParticipantAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation', 'user', 'joined_at', 'last_read_at')
    search_fields = ('conversation__name', 'user__username')

@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'conversation', 'created_at', 'content_short')
    list_filter = ('attachment_type', 'created_at')
    search_fields = ('content', 'sender__username')

    def content_short(self, obj):
        return _short(obj.content, 50)
    content_short.short_description = 'Content'

@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'comment', 'created_at')
    search_fields = ('user__username',)

@admin.register(ReadingHistory)
class ReadingHistoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'read_at')
    search_fields = ('user__username', 'post__title')

@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'privacy', 'creator', 'members_count', 'posts_count')
    list_filter = ('privacy',)
    search_fields = ('name', 'creator__username')

@admin.register(GroupMember)
class GroupMemberAdmin(admin.ModelAdmin):
    list_display = ('id', 'group', 'user', 'role', 'joined_at')
    list_filter = ('role',)

@admin.register(GroupPost)
class GroupPostAdmin(admin.ModelAdmin):
    list_display = ('id', 'group', 'user', 'created_at', 'content_short')

    def content_short(self, obj):
        return _short(obj.content, 80)
    content_short.short_description = 'Content'

@admin.register(GroupPostLike)
class GroupPostLikeAdmin(admin.ModelAdmin):
    list_display = ('id', 'post', 'user', 'created_at')

@admin.register(GroupComment)
class GroupCommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'post', 'user', 'created_at', 'content_short')
    search_fields = ('content', 'user__username')

    def content_short(self, obj):
        return _short(obj.content, 50)
    content_short.short_description = 'Content'

@admin.register(Ebook)
class EbookAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'user', 'genre', 'status', 'average_rating', 'views_count')
    list_filter = ('genre', 'status')
    search_fields = ('title', 'user__username')

@admin.register(EbookChapter)
class EbookChapterAdmin(admin.ModelAdmin):
    list_display = ('id', 'ebook', 'chapter_order', 'title')

@admin.register(EbookReview)
class EbookReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'ebook', 'user', 'rating', 'created_at')
    list_filter = ('rating',)

@admin.register(EbookLike, EbookBookmark)
class EbookReactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'ebook', 'user', 'created_at')

# Unregister Django's default Group
admin.site.unregister(AuthGroup)

# Basic admin site configuration
admin.site.site_header = "Basic Comet Admin"
admin.site.site_title = "Basic Comet Admin Portal"
admin.site.index_title = "Welcome"
