from django.core.cache import cache
from django.test import TestCase

from comet.models import Post, User

PASSWORD = "secret123"


class CometTestCase(TestCase):
    def setUp(self):
        cache.clear()

    @staticmethod
    def make_user(username, **extra):
        extra.setdefault('email', f"{username}@example.com")
        extra.setdefault('display_name', username.title())
        return User.objects.create_user(username, password=PASSWORD, **extra)

    @staticmethod
    def make_post(user, **fields):
        fields.setdefault('title', "A post")
        fields.setdefault('content', "Some content")
        fields.setdefault('tags', ["python"])
        fields.setdefault('status', 'published')
        return Post.objects.create(user=user, **fields)

    def post_json(self, url, data=None):
        return self.client.post(url, data or {}, content_type='application/json')

    def patch_json(self, url, data=None):
        return self.client.patch(url, data or {}, content_type='application/json')
