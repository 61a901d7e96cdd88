from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase

from comet.badges import (
    DEFAULT_BADGES, achievements, activity_leaders, badge_leaders, badge_progress,
    check_and_award_badges, user_stats,
)
from comet.models import Badge, Comment, Follow, Notification, UserBadge

from .base import CometTestCase


class BadgeProgressTests(SimpleTestCase):

    def test_progress_is_a_capped_percentage(self):
        self.assertEqual(badge_progress('posts', 10, {"posts": 5}), 50)
        self.assertEqual(badge_progress('posts', 10, {"posts": 25}), 100)
        self.assertEqual(badge_progress('followers', 10, {}), 0)

    def test_zero_threshold_counts_as_complete(self):
        self.assertEqual(badge_progress('posts', 0, {"posts": 0}), 100)


class SeedBadgesCommandTests(CometTestCase):

    def test_seed_is_repeatable(self):
        call_command('seed_badges', stdout=StringIO())
        call_command('seed_badges', stdout=StringIO())
        self.assertEqual(Badge.objects.count(), len(DEFAULT_BADGES))
        self.assertEqual(Badge.objects.get(name="Influencer").criteria_type, 'followers')


class AwardBadgesTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.first_post = Badge.objects.create(name="First Post", criteria_type='posts', criteria_value=1)
        self.popular = Badge.objects.create(name="Rising Star", criteria_type='likes_received', criteria_value=10)
        self.ada = self.make_user('ada')

    def test_stats_count_published_posts_only(self):
        self.make_post(self.ada)
        self.make_post(self.ada, status='draft')
        self.make_post(self.ada, likes_count=4, status='draft')
        stats = user_stats(self.ada)
        self.assertEqual(stats["posts"], 1)
        self.assertEqual(stats["likes_received"], 4)

    def test_awards_once_and_notifies(self):
        self.assertEqual(check_and_award_badges(self.ada), [])

        self.make_post(self.ada)
        self.assertEqual(check_and_award_badges(self.ada), [self.first_post])
        self.assertEqual(check_and_award_badges(self.ada), [])

        self.assertEqual(UserBadge.objects.filter(user=self.ada).count(), 1)
        notification = Notification.objects.get(user=self.ada)
        self.assertEqual(notification.type, 'badge')
        self.assertIsNone(notification.actor)

    def test_publishing_through_the_api_awards_badge(self):
        self.client.force_login(self.ada)
        response = self.post_json('/api/v1/posts', {
            "title": "Hello", "content": "World", "tags": ["intro"],
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual([b["name"] for b in response.json()["badges_earned"]], ["First Post"])

    def test_achievements_report_progress(self):
        self.make_post(self.ada, likes_count=5)
        check_and_award_badges(self.ada)

        data = achievements(self.ada)
        self.assertEqual(data["earned_count"], 1)
        self.assertEqual(data["total_count"], 2)
        by_name = {b["name"]: b for b in data["badges"]}
        self.assertTrue(by_name["First Post"]["earned"])
        self.assertFalse(by_name["Rising Star"]["earned"])
        self.assertEqual(by_name["Rising Star"]["progress"], 50)
        self.assertEqual(by_name["Rising Star"]["criteria_label"], "Likes Received")

    def test_achievements_view(self):
        self.client.force_login(self.ada)
        data = self.client.get('/api/v1/achievements').json()
        self.assertEqual(data["stats"]["posts"], 0)
        self.assertEqual(len(data["badges"]), 2)


class LeaderboardTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.bob = self.make_user('bob')
        self.cy = self.make_user('cy')

    def test_activity_score(self):
        post = self.make_post(self.ada, likes_count=3)
        Comment.objects.create(post=post, user=self.ada, content="one")
        Comment.objects.create(post=post, user=self.ada, content="two")
        Comment.objects.create(post=post, user=self.bob, content="hi")

        leaders = activity_leaders()
        self.assertEqual([row["user"] for row in leaders], [self.ada, self.bob])
        self.assertEqual(leaders[0]["score"], 10 + 3 + 2 * 5)
        self.assertEqual((leaders[0]["posts"], leaders[0]["likes"], leaders[0]["comments"]), (1, 3, 2))
        self.assertEqual(leaders[1]["score"], 5)

    def test_badge_leaders(self):
        one = Badge.objects.create(name="One", criteria_type='posts', criteria_value=1)
        two = Badge.objects.create(name="Two", criteria_type='followers', criteria_value=1)
        UserBadge.objects.create(user=self.bob, badge=one)
        UserBadge.objects.create(user=self.bob, badge=two)
        UserBadge.objects.create(user=self.ada, badge=one)

        self.assertEqual(badge_leaders(), [(self.bob, 2), (self.ada, 1)])

    def test_leaderboard_view(self):
        Follow.objects.create(follower=self.ada, following=self.bob)
        self.make_post(self.cy)
        data = self.client.get('/api/v1/leaderboard').json()
        self.assertEqual(data["badge_leaders"], [])
        self.assertEqual(data["activity_leaders"][0]["user"]["username"], 'cy')
