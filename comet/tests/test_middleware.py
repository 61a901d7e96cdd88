from datetime import timedelta

from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.http import HttpResponse
from django.test import RequestFactory
from django.utils import timezone

from comet.context_processors import unread_counts
from comet.messaging import get_or_create_direct, send_message
from comet.middleware import TimezoneMiddleware, UpdateLastSeenMiddleware
from comet.models import User
from comet.notifications import notify

from .base import CometTestCase


class TimezoneMiddlewareTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.factory = RequestFactory()
        self.addCleanup(timezone.deactivate)

    def active_timezone(self, user):
        seen = {}

        def view(request):
            seen["tz"] = timezone.get_current_timezone_name()
            return HttpResponse()

        request = self.factory.get('/')
        request.user = user
        TimezoneMiddleware(view)(request)
        return seen["tz"]

    def test_user_timezone(self):
        self.assertEqual(self.active_timezone(self.make_user('ada', timezone='Asia/Dhaka')), 'Asia/Dhaka')

    def test_invalid_timezone_falls_back_to_utc(self):
        self.assertEqual(self.active_timezone(self.make_user('ada', timezone='Mars/Olympus')), 'UTC')

    def test_anonymous_uses_utc(self):
        self.assertEqual(self.active_timezone(AnonymousUser()), 'UTC')


class LastSeenMiddlewareTests(CometTestCase):

    def test_last_seen_is_throttled(self):
        ada = self.make_user('ada')
        long_ago = timezone.now() - timedelta(days=1)
        User.objects.filter(pk=ada.pk).update(last_seen=long_ago)
        self.client.force_login(ada)

        self.client.get('/api/v1/auth/me')
        ada.refresh_from_db()
        self.assertGreater(ada.last_seen, long_ago)
        self.assertTrue(ada.is_online)
        self.assertIsNotNone(cache.get(f"user_{ada.id}_last_seen"))

        User.objects.filter(pk=ada.pk).update(last_seen=long_ago)
        self.client.get('/api/v1/auth/me')
        ada.refresh_from_db()
        self.assertEqual(ada.last_seen, long_ago)

    def test_anonymous_requests_pass_through(self):
        request = RequestFactory().get('/')
        request.user = AnonymousUser()
        response = UpdateLastSeenMiddleware(lambda r: HttpResponse("ok"))(request)
        self.assertEqual(response.content, b"ok")


class UnreadCountsContextTests(CometTestCase):

    def test_counts(self):
        ada = self.make_user('ada')
        bob = self.make_user('bob')
        conversation, _ = get_or_create_direct(ada, bob)
        send_message(conversation, bob, "hi")
        send_message(conversation, bob, "you there?")
        notify(ada, bob, 'follow')

        request = RequestFactory().get('/')
        request.user = ada
        self.assertEqual(unread_counts(request), {
            "unread_messages_count": 2,
            "unread_notifications_count": 1,
        })

        request.user = AnonymousUser()
        self.assertEqual(unread_counts(request), {
            "unread_messages_count": 0,
            "unread_notifications_count": 0,
        })
