import importlib
import os
import threading
from unittest import mock

from django.apps import apps
from django.contrib import admin
from django.test import SimpleTestCase

from basic_comet import settings as project_settings
from comet.presence import set_typing, typing_users
from comet.realtime import events_since, push_event

from .base import CometTestCase


class AdminRegistrationTests(SimpleTestCase):

    def test_every_model_is_registered(self):
        missing = [
            model.__name__
            for model in apps.get_app_config('comet').get_models()
            if not admin.site.is_registered(model)
        ]
        self.assertEqual(missing, [])


class EnvironmentSettingsTests(SimpleTestCase):

    def reload_with(self, **env):
        with mock.patch.dict(os.environ, env):
            module = importlib.reload(project_settings)
            values = {key: getattr(module, key) for key in env}
        importlib.reload(project_settings)
        return values

    def test_application_limits_come_from_environment(self):
        values = self.reload_with(
            NOTIFICATION_FETCH_LIMIT='20',
            TYPING_INDICATOR_TIMEOUT='8',
            POSTS_PER_PAGE='25',
        )
        self.assertEqual(values, {
            "NOTIFICATION_FETCH_LIMIT": 20,
            "TYPING_INDICATOR_TIMEOUT": 8,
            "POSTS_PER_PAGE": 25,
        })

    def test_speech_to_text_endpoint_from_environment(self):
        values = self.reload_with(
            ELEVENLABS_STT_URL='https://stt.example.com/v1',
            ELEVENLABS_MODEL_ID='scribe_v2',
        )
        self.assertEqual(values["ELEVENLABS_STT_URL"], 'https://stt.example.com/v1')
        self.assertEqual(values["ELEVENLABS_MODEL_ID"], 'scribe_v2')


class ConcurrentCacheWriteTests(CometTestCase):

    def run_threads(self, target, n):
        threads = [threading.Thread(target=target, args=(i,)) for i in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def test_parallel_pushes_keep_every_event(self):
        self.run_threads(lambda i: push_event(1, 'notification', {"n": i}), 50)
        events = events_since(1)
        self.assertEqual(len(events), 50)
        self.assertEqual(sorted(e["payload"]["n"] for e in events), list(range(50)))

    def test_parallel_typing_updates_keep_every_user(self):
        users = [self.make_user(f"user{i}") for i in range(10)]
        self.run_threads(lambda i: set_typing(7, users[i]), 10)
        self.assertEqual(len(typing_users(7)), 10)
