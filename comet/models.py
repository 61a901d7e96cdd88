"""
================================================================================
BASIC COMET - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models defining the complete Basic Comet schema
@version     1.0.0
@author      Basic Comet Team
@date        October 2026

MODULE PURPOSE
================================================================================
This module defines all database models for the Basic Comet platform:
- User model (extended from AbstractUser, carries the public profile)
- Posts (articles, notes, videos), likes and comments
- Follow relationships and reading history
- Notifications
- Badges (gamification)
- Messaging (direct and group conversations)
- Community groups with their own posts
- Ebooks with chapters, reviews, likes and bookmarks

DATABASE STRUCTURE
================================================================================
1. User & Profile
   - User (AbstractUser extension)

2. Content Models
   - Post, Like, Comment, ReadingHistory

3. Social Relationships
   - Follow

4. Notifications & Achievements
   - Notification, Badge, UserBadge

5. Messaging System
   - Conversation, ConversationParticipant, Message

6. Community Groups
   - Group, GroupMember, GroupPost, GroupPostLike, GroupComment

7. Ebooks
   - Ebook, EbookChapter, EbookReview, EbookLike, EbookBookmark

MODEL RELATIONSHIPS
================================================================================
User (1) ──────> (N) Post
User (1) ──────> (N) Comment
User (1) ──────> (N) Notification
User (1) ──────> (N) UserBadge ──────> (1) Badge

Post (1) ──────> (N) Like
Post (1) ──────> (N) Comment

User (N) <─────> (N) User (Follow)
User (N) <─────> (N) Conversation (via ConversationParticipant)
User (N) <─────> (N) Group (via GroupMember)

COUNTERS
================================================================================
likes_count / comments_count / members_count / posts_count / views_count are
denormalized. They are only ever changed through the classmethods
``increment`` / ``decrement`` on CounterMixin, which issue a single
UPDATE ... SET col = col +/- 1 so concurrent writers never lose updates.
Decrements never go below zero.

================================================================================
"""

from datetime import timedelta

import pytz
from cloudinary.models import CloudinaryField
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone as dj_timezone

# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

"""
Timezone choices for user preference selection.
Uses all available timezones from pytz library.
"""
TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.all_timezones]

POST_TYPE_CHOICES = [
    ('article', 'Article'),
    ('note', 'Note'),
    ('video', 'Video'),
]

POST_STATUS_CHOICES = [
    ('draft', 'Draft'),
    ('published', 'Published'),
]

"""
Feed category ids. 'all' is a filter value only and never stored on a post.
"""
CATEGORY_CHOICES = [
    ('it', 'IT'),
    ('engineering', 'Engineering'),
    ('data-science', 'Data Science'),
    ('cybersecurity', 'Cybersecurity'),
    ('cloud-computing', 'Cloud Computing'),
    ('design', 'Design'),
    ('ai', 'AI'),
    ('coding', 'Coding'),
    ('agi', 'AGI'),
]

NOTIFICATION_TYPE_CHOICES = [
    ('like', 'Like'),
    ('comment', 'Comment'),
    ('follow', 'Follow'),
    ('message', 'Message'),
    ('mention', 'Mention'),
    ('badge', 'Badge'),
    ('group_post', 'Group post'),
]

BADGE_CRITERIA_CHOICES = [
    ('posts', 'Posts Published'),
    ('likes_received', 'Likes Received'),
    ('comments', 'Comments Made'),
    ('following', 'Users Following'),
    ('followers', 'Followers Gained'),
]

BADGE_ICON_CHOICES = [
    ('pencil', 'Pencil'),
    ('book-open', 'Book'),
    ('crown', 'Crown'),
    ('star', 'Star'),
    ('heart', 'Heart'),
    ('trophy', 'Trophy'),
    ('message-circle', 'Message'),
    ('users', 'Users'),
    ('user-plus', 'User plus'),
    ('award', 'Award'),
]

ATTACHMENT_TYPE_CHOICES = [
    ('image', 'Image'),
    ('file', 'File'),
]

GROUP_PRIVACY_CHOICES = [
    ('public', 'Public'),
    ('private', 'Private'),
]

GROUP_ROLE_CHOICES = [
    ('admin', 'Admin'),
    ('moderator', 'Moderator'),
    ('member', 'Member'),
]

EBOOK_GENRE_CHOICES = [
    ('fiction', 'Fiction'),
    ('non_fiction', 'Non-Fiction'),
    ('technology', 'Technology'),
    ('science', 'Science'),
    ('self_help', 'Self Help'),
    ('business', 'Business'),
    ('biography', 'Biography'),
    ('history', 'History'),
    ('fantasy', 'Fantasy'),
    ('mystery', 'Mystery'),
    ('romance', 'Romance'),
    ('horror', 'Horror'),
    ('poetry', 'Poetry'),
    ('education', 'Education'),
    ('other', 'Other'),
]

EBOOK_STATUS_CHOICES = [
    ('draft', 'Draft'),
    ('published', 'Published'),
    ('archived', 'Archived'),
]


# ============================================================================
# SHARED HELPERS
# ============================================================================

class CounterMixin:
    """
    Atomic counter updates for denormalized count columns.

    Example:
        Post.increment(post.id, 'likes_count')
        Group.decrement(group.id, 'members_count')
    """

    @classmethod
    def increment(cls, pk, field):
        return cls.objects.filter(pk=pk).update(**{field: F(field) + 1})

    @classmethod
    def decrement(cls, pk, field):
        return cls.objects.filter(pk=pk).update(
            **{field: Greatest(F(field) - 1, Value(0))}
        )


# ============================================================================
# SECTION 1: USER & PROFILE
# ============================================================================

class User(AbstractUser):
    """
    Extended User model carrying the public profile.

    Attributes:
        display_name (CharField): Name shown across the app
        bio (TextField): Profile biography
        avatar (ImageField): Profile picture
        cover (ImageField): Profile cover image
        location (CharField): Free-form location
        website (URLField): Personal website
        twitter / github / linkedin (CharField): Social handles or links
        timezone (CharField): Preferred timezone
        last_seen (DateTimeField): Last activity timestamp
        browser_notifications_enabled (BooleanField): Opt-in for browser alerts

    Properties:
        is_online: True if user was active within the online window
        name: display_name falling back to username

    Related Names:
        posts, comments, likes, notifications, badges (UserBadge),
        following / followers (Follow), reading_history,
        conversation_participations, group_memberships, ebooks
    """

    display_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Name shown on posts and profile"
    )
    bio = models.TextField(
        max_length=500,
        blank=True,
        help_text="Profile biography or description"
    )
    avatar = models.ImageField(
        upload_to='avatars/',
        null=True,
        blank=True,
        help_text="User's profile avatar image"
    )
    cover = models.ImageField(
        upload_to='covers/',
        null=True,
        blank=True,
        help_text="Profile cover image"
    )
    location = models.CharField(
        max_length=100,
        blank=True,
        help_text="Where the user is based"
    )
    website = models.URLField(
        max_length=300,
        blank=True,
        help_text="Personal website"
    )
    twitter = models.CharField(max_length=200, blank=True, help_text="Twitter/X handle or link")
    github = models.CharField(max_length=200, blank=True, help_text="GitHub handle or link")
    linkedin = models.CharField(max_length=200, blank=True, help_text="LinkedIn handle or link")

    timezone = models.CharField(
        max_length=100,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's preferred timezone for display"
    )
    last_seen = models.DateTimeField(
        null=True,
        blank=True,
        default=dj_timezone.now,
        help_text="Last activity timestamp for online status"
    )
    browser_notifications_enabled = models.BooleanField(
        default=False,
        help_text="Show browser notifications for new activity"
    )

    @property
    def name(self):
        return self.display_name or self.username

    @property
    def avatar_url(self):
        return self.avatar.url if self.avatar else None

    @property
    def cover_url(self):
        return self.cover.url if self.cover else None

    @property
    def is_online(self):
        """
        A user is considered online if their last_seen timestamp
        is within the last 5 minutes.
        """
        if not self.last_seen:
            return False
        return dj_timezone.now() - self.last_seen < timedelta(minutes=5)


# ============================================================================
# SECTION 2: CONTENT MODELS
# ============================================================================

class Post(CounterMixin, models.Model):
    """
    User-authored content item.

    Attributes:
        user (ForeignKey): Post author
        type (CharField): article, note or video
        title (CharField): Post title (may be empty on drafts)
        content (TextField): Body
        status (CharField): draft or published
        tags (JSONField): List of tag strings
        category (CharField): Feed category id
        video_url (URLField): Only set for video posts
        likes_count / comments_count / views_count: Denormalized counters

    Example:
        post = Post.objects.create(user=user, title="Hello", content="...",
                                   status='published', tags=['django'])
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text="Author of this post"
    )
    type = models.CharField(
        max_length=10,
        choices=POST_TYPE_CHOICES,
        default='article',
        help_text="Content type"
    )
    title = models.CharField(
        max_length=300,
        blank=True,
        help_text="Post title"
    )
    content = models.TextField(
        blank=True,
        help_text="Post body"
    )
    status = models.CharField(
        max_length=10,
        choices=POST_STATUS_CHOICES,
        default='draft',
        help_text="Draft or published"
    )
    tags = models.JSONField(
        default=list,
        blank=True,
        help_text="List of tag strings"
    )
    category = models.CharField(
        max_length=30,
        choices=CATEGORY_CHOICES,
        blank=True,
        help_text="Feed category"
    )
    video_url = models.URLField(
        max_length=500,
        blank=True,
        help_text="Video link (video posts only)"
    )
    likes_count = models.PositiveIntegerField(default=0, help_text="Number of likes")
    comments_count = models.PositiveIntegerField(default=0, help_text="Number of comments")
    views_count = models.PositiveIntegerField(default=0, help_text="Number of views")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")
    updated_at = models.DateTimeField(auto_now=True, help_text="Last edit timestamp")

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', '-created_at']),
        ]

    def __str__(self):
        return f"{self.user} - {self.title or self.content[:50]}"


class Comment(CounterMixin, models.Model):
    """
    Comment on a post. Listed oldest first under the post.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Comment author"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Post being commented on"
    )
    content = models.TextField(help_text="Comment text content")
    likes_count = models.PositiveIntegerField(default=0, help_text="Number of likes")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user} on {self.post_id}: {self.content[:50]}"


class Like(models.Model):
    """
    A like on either a post or a comment (exactly one of them is set).
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='likes',
        help_text="User who liked"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='likes',
        help_text="Liked post"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='likes',
        help_text="Liked comment"
    )
    created_at = models.DateTimeField(auto_now_add=True, help_text="When the like was made")

    class Meta:
        ordering = ['-created_at']
        unique_together = [('user', 'post'), ('user', 'comment')]


class ReadingHistory(models.Model):
    """
    Last time a user read a post. One row per (user, post), upserted on read.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='reading_history',
        help_text="Reader"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='reads',
        help_text="Post that was read"
    )
    read_at = models.DateTimeField(default=dj_timezone.now, help_text="Last read timestamp")

    class Meta:
        ordering = ['-read_at']
        unique_together = ('user', 'post')


# ============================================================================
# SECTION 3: SOCIAL RELATIONSHIP MODELS
# ============================================================================

class Follow(models.Model):
    """
    One-way follow connection.

    Related Names:
        follower.following: Follow rows where the user follows someone
        following.followers: Follow rows where someone follows the user
    """

    follower = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='following',
        help_text="User who follows"
    )
    following = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='followers',
        help_text="User being followed"
    )
    created_at = models.DateTimeField(auto_now_add=True, help_text="When the follow started")

    class Meta:
        ordering = ['-created_at']
        unique_together = ('follower', 'following')

    def __str__(self):
        return f"{self.follower} follows {self.following}"


# ============================================================================
# SECTION 4: NOTIFICATIONS & ACHIEVEMENTS
# ============================================================================

class Notification(models.Model):
    """
    Event targeted at a user. Unread while read_at is null.

    Example:
        Notification.objects.create(user=post.user, actor=liker,
                                    type='like', post=post)
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="User receiving this notification"
    )
    actor = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        help_text="User who performed the action"
    )
    type = models.CharField(
        max_length=20,
        choices=NOTIFICATION_TYPE_CHOICES,
        help_text="Event type"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Associated post (if applicable)"
    )
    comment = models.ForeignKey(
        Comment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Associated comment (if applicable)"
    )
    message = models.ForeignKey(
        'Message',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Associated message (if applicable)"
    )
    group_post = models.ForeignKey(
        'GroupPost',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Associated group post (if applicable)"
    )
    read_at = models.DateTimeField(null=True, blank=True, help_text="When it was read")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'read_at', '-created_at']),
        ]

    @property
    def is_read(self):
        return self.read_at is not None


class Badge(models.Model):
    """
    Gamification badge awarded once a user statistic reaches criteria_value.
    """

    name = models.CharField(max_length=100, unique=True, help_text="Badge name")
    description = models.CharField(max_length=300, blank=True, help_text="What it is for")
    icon = models.CharField(
        max_length=30,
        choices=BADGE_ICON_CHOICES,
        default='award',
        help_text="Icon name"
    )
    criteria_type = models.CharField(
        max_length=20,
        choices=BADGE_CRITERIA_CHOICES,
        help_text="Statistic the threshold applies to"
    )
    criteria_value = models.PositiveIntegerField(help_text="Threshold to reach")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")

    class Meta:
        ordering = ['criteria_type', 'criteria_value']

    def __str__(self):
        return self.name


class UserBadge(models.Model):
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='badges',
        help_text="Badge holder"
    )
    badge = models.ForeignKey(
        Badge,
        on_delete=models.CASCADE,
        related_name='holders',
        help_text="Earned badge"
    )
    earned_at = models.DateTimeField(auto_now_add=True, help_text="When it was earned")

    class Meta:
        ordering = ['-earned_at']
        unique_together = ('user', 'badge')


# ============================================================================
# SECTION 5: MESSAGING SYSTEM MODELS
# ============================================================================

class Conversation(models.Model):
    """
    Messaging thread. Direct conversations have exactly two participants and
    is_group False; group chats carry a name and an optional avatar.

    Related Names:
        participants: ConversationParticipant rows
        messages: Message rows
    """

    name = models.CharField(max_length=255, blank=True, help_text="Group chat name")
    is_group = models.BooleanField(default=False, help_text="True for group chats")
    created_by = models.ForeignKey(
        User,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='created_conversations',
        help_text="User who created this conversation"
    )
    avatar_url = models.URLField(max_length=500, blank=True, help_text="Group chat avatar")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")
    updated_at = models.DateTimeField(auto_now=True, help_text="Bumped on every new message")

    class Meta:
        ordering = ['-updated_at']

    def __str__(self):
        if self.is_group:
            return self.name or f"Group #{self.id}"
        return f"DM #{self.id}"


class ConversationParticipant(models.Model):
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='participants',
        help_text="Conversation this membership belongs to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='conversation_participations',
        help_text="Participant"
    )
    joined_at = models.DateTimeField(auto_now_add=True, help_text="When user joined")
    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time user read messages (for unread count)"
    )

    class Meta:
        unique_together = ('conversation', 'user')

    def __str__(self):
        return f"{self.user} in {self.conversation}"


class Message(models.Model):
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='messages',
        help_text="Conversation this message belongs to"
    )
    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_messages',
        help_text="User who sent this message"
    )
    content = models.TextField(blank=True, help_text="Message text content")
    attachment_url = models.URLField(max_length=500, blank=True, help_text="Uploaded attachment")
    attachment_type = models.CharField(
        max_length=10,
        choices=ATTACHMENT_TYPE_CHOICES,
        blank=True,
        help_text="image or file"
    )
    attachment_name = models.CharField(max_length=255, blank=True, help_text="Original file name")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Message creation timestamp")

    class Meta:
        ordering = ['created_at']


# ============================================================================
# SECTION 6: COMMUNITY GROUPS
# ============================================================================

class Group(CounterMixin, models.Model):
    """
    Topic community. The creator joins as admin on creation.
    """

    name = models.CharField(max_length=150, help_text="Group name")
    description = models.TextField(blank=True, help_text="What the group is about")
    avatar = CloudinaryField('avatar', folder='group_avatars', null=True, blank=True,
                             help_text="Group avatar image")
    cover = CloudinaryField('cover', folder='group_covers', null=True, blank=True,
                            help_text="Group cover image")
    privacy = models.CharField(
        max_length=10,
        choices=GROUP_PRIVACY_CHOICES,
        default='public',
        help_text="Public or private"
    )
    creator = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='created_groups',
        help_text="User who created the group"
    )
    members_count = models.PositiveIntegerField(default=0, help_text="Number of members")
    posts_count = models.PositiveIntegerField(default=0, help_text="Number of posts")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")
    updated_at = models.DateTimeField(auto_now=True, help_text="Last change timestamp")

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class GroupMember(models.Model):
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='members',
        help_text="Group"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='group_memberships',
        help_text="Member"
    )
    role = models.CharField(
        max_length=10,
        choices=GROUP_ROLE_CHOICES,
        default='member',
        help_text="Role inside the group"
    )
    joined_at = models.DateTimeField(auto_now_add=True, help_text="When the user joined")

    class Meta:
        ordering = ['joined_at']
        unique_together = ('group', 'user')


class GroupPost(CounterMixin, models.Model):
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text="Group the post belongs to"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='group_posts',
        help_text="Author"
    )
    title = models.CharField(max_length=300, blank=True, help_text="Optional title")
    content = models.TextField(help_text="Post body")
    likes_count = models.PositiveIntegerField(default=0, help_text="Number of likes")
    comments_count = models.PositiveIntegerField(default=0, help_text="Number of comments")
    created_at = models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")

    class Meta:
        ordering = ['-created_at']


class GroupPostLike(models.Model):
    post = models.ForeignKey(GroupPost, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='group_post_likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('post', 'user')


class GroupComment(models.Model):
    post = models.ForeignKey(GroupPost, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='group_comments')
    content = models.TextField(help_text="Comment text")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']


# ============================================================================
# SECTION 7: EBOOKS
# ============================================================================

class Ebook(CounterMixin, models.Model):
    """
    Long-form chaptered publication.

    Attributes:
        genre (CharField): One of EBOOK_GENRE_CHOICES
        status (CharField): draft, published or archived
        views_count / likes_count / reviews_count: Denormalized counters
        average_rating (DecimalField): Mean of review ratings, 0 when none
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='ebooks',
        help_text="Author"
    )
    title = models.CharField(max_length=300, help_text="Ebook title")
    description = models.TextField(blank=True, help_text="Blurb")
    cover = CloudinaryField('cover', folder='ebook_covers', null=True, blank=True,
                            help_text="Cover image")
    genre = models.CharField(
        max_length=20,
        choices=EBOOK_GENRE_CHOICES,
        default='other',
        help_text="Genre"
    )
    status = models.CharField(
        max_length=10,
        choices=EBOOK_STATUS_CHOICES,
        default='draft',
        help_text="Publication status"
    )
    views_count = models.PositiveIntegerField(default=0)
    likes_count = models.PositiveIntegerField(default=0)
    reviews_count = models.PositiveIntegerField(default=0)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class EbookChapter(models.Model):
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name='chapters')
    title = models.CharField(max_length=300, help_text="Chapter title")
    content = models.TextField(blank=True, help_text="Chapter body")
    chapter_order = models.PositiveIntegerField(default=0, help_text="Position in the book")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['chapter_order']


class EbookReview(models.Model):
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='ebook_reviews')
    rating = models.PositiveSmallIntegerField(help_text="1 to 5")
    content = models.TextField(blank=True, help_text="Review text")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ('ebook', 'user')


class EbookLike(models.Model):
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name='likes')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='ebook_likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('ebook', 'user')


class EbookBookmark(models.Model):
    ebook = models.ForeignKey(Ebook, on_delete=models.CASCADE, related_name='bookmarks')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='ebook_bookmarks')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ('ebook', 'user')


"""
================================================================================
END OF MODELS DEFINITION
================================================================================

DATABASE MIGRATION NOTES
================================================================================
After modifying models, run:
1. python manage.py makemigrations comet
2. python manage.py migrate
3. python manage.py seed_badges

MAINTAINER
================================================================================
Basic Comet Team
Last updated: October 2026
================================================================================
"""
