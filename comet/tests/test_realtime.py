from django.test import SimpleTestCase

from comet.models import Badge, Notification, UserBadge
from comet.realtime import (
    INBOX_SIZE, ChangeFeed, clear_inbox, events_since, feed, parse_filter, push_event,
)

from .base import CometTestCase


def change(table='notifications', event='INSERT', **row):
    return {"table": table, "event": event, "new": row}


class ChangeFeedTests(SimpleTestCase):

    def setUp(self):
        self.feed = ChangeFeed()
        self.received = []

    def test_parse_filter(self):
        self.assertEqual(parse_filter("user_id=eq.5"), ("user_id", "5"))
        with self.assertRaises(ValueError):
            parse_filter("user_id=gt.5")
        with self.assertRaises(ValueError):
            parse_filter("user_id")

    def test_table_event_and_filter_matching(self):
        self.feed.subscribe('notifications', self.received.append, event='INSERT', filter='user_id=eq.1')

        self.feed.publish('notifications', 'INSERT', new={"id": 1, "user_id": 1})
        self.feed.publish('notifications', 'INSERT', new={"id": 2, "user_id": 2})
        self.feed.publish('notifications', 'UPDATE', new={"id": 1, "user_id": 1})
        self.feed.publish('messages', 'INSERT', new={"id": 3, "user_id": 1})

        self.assertEqual([c["new"]["id"] for c in self.received], [1])
        self.assertEqual(self.received[0]["old"], {})

    def test_delete_events_match_on_old_row(self):
        self.feed.subscribe('messages', self.received.append, filter='conversation_id=eq.9')
        self.feed.publish('messages', 'DELETE', old={"id": 4, "conversation_id": 9})
        self.assertEqual(len(self.received), 1)

    def test_unsubscribe(self):
        sub = self.feed.subscribe('notifications', self.received.append)
        self.assertTrue(self.feed.unsubscribe(sub))
        self.assertFalse(self.feed.unsubscribe(sub))
        self.assertEqual(self.feed.publish('notifications', 'INSERT', new={"id": 1}), 0)

    def test_unknown_event_rejected(self):
        with self.assertRaises(ValueError):
            self.feed.subscribe('notifications', self.received.append, event='UPSERT')

    def test_failing_subscriber_does_not_block_others(self):
        def boom(change):
            raise RuntimeError("boom")

        self.feed.subscribe('notifications', boom)
        self.feed.subscribe('notifications', self.received.append)
        with self.assertLogs('comet.realtime', level='ERROR'):
            delivered = self.feed.publish('notifications', 'INSERT', new={"id": 1})
        self.assertEqual(delivered, 2)
        self.assertEqual(len(self.received), 1)


class InboxTests(CometTestCase):

    def test_events_since_cursor(self):
        first = push_event(1, 'notification', {"n": 1})
        second = push_event(1, 'notification', {"n": 2})
        push_event(2, 'notification', {"n": 3})

        self.assertEqual([e["id"] for e in events_since(1)], [first, second])
        self.assertEqual([e["payload"] for e in events_since(1, first)], [{"n": 2}])

        clear_inbox(1)
        self.assertEqual(events_since(1), [])
        self.assertEqual(len(events_since(2)), 1)

    def test_inbox_is_bounded(self):
        for i in range(INBOX_SIZE + 5):
            push_event(1, 'notification', {"n": i})
        events = events_since(1)
        self.assertEqual(len(events), INBOX_SIZE)
        self.assertEqual(events[0]["payload"], {"n": 5})


class ModelSignalTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.bob = self.make_user('bob')
        self.received = []

    def listen(self, table, **kwargs):
        sub = feed.subscribe(table, self.received.append, **kwargs)
        self.addCleanup(feed.unsubscribe, sub)

    def test_notification_rows_are_published(self):
        self.listen('notifications', filter=f'user_id=eq.{self.ada.id}')
        notification = Notification.objects.create(user=self.ada, actor=self.bob, type='follow')
        Notification.objects.create(user=self.bob, actor=self.ada, type='follow')
        notification.delete()

        self.assertEqual([c["event"] for c in self.received], ['INSERT', 'DELETE'])
        self.assertEqual(self.received[0]["new"]["actor_id"], self.bob.id)

    def test_badge_award_reaches_inbox(self):
        badge = Badge.objects.create(name="First Post", criteria_type='posts', criteria_value=1)
        UserBadge.objects.create(user=self.ada, badge=badge)
        [event] = events_since(self.ada.id)
        self.assertEqual(event["kind"], 'badge_earned')
        self.assertEqual(event["payload"]["badge"]["name"], "First Post")

    def test_events_endpoint(self):
        self.client.force_login(self.ada)
        Notification.objects.create(user=self.ada, actor=self.bob, type='follow')

        data = self.client.get('/api/v1/realtime/events').json()
        self.assertEqual(len(data["events"]), 1)
        cursor = data["cursor"]

        data = self.client.get(f'/api/v1/realtime/events?since={cursor}').json()
        self.assertEqual(data, {"events": [], "cursor": cursor})
        self.assertEqual(self.client.get('/api/v1/realtime/events?since=x').status_code, 400)
