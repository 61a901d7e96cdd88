from comet.models import Group, GroupMember, GroupPost, Notification

from .base import CometTestCase


class GroupTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.bob = self.make_user('bob')
        self.cy = self.make_user('cy')

    def create_group(self, owner, **data):
        self.client.force_login(owner)
        data.setdefault('name', "Pythonistas")
        return self.post_json('/api/v1/groups', data).json()["group"]

    def test_creator_becomes_admin(self):
        group = self.create_group(self.ada, description="All things Python")
        self.assertEqual(group["members_count"], 1)
        self.assertEqual(group["privacy"], 'public')
        self.assertEqual(GroupMember.objects.get(group_id=group["id"], user=self.ada).role, 'admin')

        detail = self.client.get(f'/api/v1/groups/{group["id"]}').json()
        self.assertTrue(detail["is_admin"])

    def test_create_validation(self):
        self.client.force_login(self.ada)
        self.assertEqual(self.post_json('/api/v1/groups', {"name": " "}).status_code, 400)
        self.assertEqual(self.post_json('/api/v1/groups', {"name": "X", "privacy": "secret"}).status_code, 400)
        self.client.logout()
        self.assertEqual(self.post_json('/api/v1/groups', {"name": "X"}).status_code, 401)

    def test_wrongly_typed_fields(self):
        self.client.force_login(self.ada)
        response = self.post_json('/api/v1/groups', {"name": 5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "name must be a string")
        self.assertFalse(Group.objects.exists())

        group = self.create_group(self.ada)
        response = self.post_json(f'/api/v1/groups/{group["id"]}/posts', {"content": {"text": "hi"}})
        self.assertEqual(response.json()["error"], "content must be a string")
        response = self.post_json(f'/api/v1/groups/{group["id"]}/members', {"user_id": "bob"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "user_id must be an integer")

    def test_join_and_leave(self):
        group = self.create_group(self.ada)
        self.client.force_login(self.bob)
        response = self.post_json(f'/api/v1/groups/{group["id"]}/join')
        self.assertEqual(response.json()["members_count"], 2)
        self.assertEqual(self.post_json(f'/api/v1/groups/{group["id"]}/join').status_code, 400)

        mine = self.client.get('/api/v1/groups/mine').json()["results"]
        self.assertEqual([g["id"] for g in mine], [group["id"]])

        response = self.post_json(f'/api/v1/groups/{group["id"]}/leave')
        self.assertEqual(response.json()["members_count"], 1)
        self.assertEqual(self.post_json(f'/api/v1/groups/{group["id"]}/leave').status_code, 400)

    def test_private_groups(self):
        group = self.create_group(self.ada, privacy='private')
        self.client.force_login(self.bob)
        self.assertEqual(self.post_json(f'/api/v1/groups/{group["id"]}/join').status_code, 403)
        self.assertEqual(self.client.get(f'/api/v1/groups/{group["id"]}/posts').status_code, 403)
        self.assertEqual(self.client.get(f'/api/v1/groups/{group["id"]}/members').status_code, 403)

        # Admin adds bob directly
        self.client.force_login(self.ada)
        response = self.post_json(f'/api/v1/groups/{group["id"]}/members', {"user_id": self.bob.id})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Group.objects.get(id=group["id"]).members_count, 2)

        self.client.force_login(self.bob)
        self.assertEqual(self.client.get(f'/api/v1/groups/{group["id"]}/posts').status_code, 200)
        response = self.post_json(f'/api/v1/groups/{group["id"]}/members', {"user_id": self.cy.id})
        self.assertEqual(response.status_code, 403)

    def test_posting_requires_membership_and_notifies_creator(self):
        group = self.create_group(self.ada)
        self.client.force_login(self.bob)
        url = f'/api/v1/groups/{group["id"]}/posts'
        self.assertEqual(self.post_json(url, {"content": "hello"}).status_code, 403)

        self.post_json(f'/api/v1/groups/{group["id"]}/join')
        self.assertEqual(self.post_json(url, {"content": " "}).status_code, 400)
        response = self.post_json(url, {"title": "Hi", "content": "hello"})
        self.assertEqual(response.status_code, 201)

        self.assertEqual(Group.objects.get(id=group["id"]).posts_count, 1)
        notification = Notification.objects.get(type='group_post')
        self.assertEqual(notification.user, self.ada)
        self.assertEqual(notification.group_post_id, response.json()["post"]["id"])

    def test_creator_posting_does_not_notify_self(self):
        group = self.create_group(self.ada)
        self.post_json(f'/api/v1/groups/{group["id"]}/posts', {"content": "welcome"})
        self.assertFalse(Notification.objects.filter(type='group_post').exists())

    def test_post_likes_and_comments(self):
        group = self.create_group(self.ada)
        post_id = self.post_json(f'/api/v1/groups/{group["id"]}/posts', {"content": "welcome"}).json()["post"]["id"]

        self.client.force_login(self.bob)
        self.assertEqual(self.post_json(f'/api/v1/group-posts/{post_id}/like').json()["likes_count"], 1)
        posts = self.client.get(f'/api/v1/groups/{group["id"]}/posts').json()["results"]
        self.assertTrue(posts[0]["is_liked"])
        self.assertEqual(self.post_json(f'/api/v1/group-posts/{post_id}/like').json()["likes_count"], 0)

        comment = self.post_json(f'/api/v1/group-posts/{post_id}/comments', {"content": "thanks"}).json()["comment"]
        self.assertEqual(GroupPost.objects.get(id=post_id).comments_count, 1)
        comments = self.client.get(f'/api/v1/group-posts/{post_id}/comments').json()["results"]
        self.assertEqual([c["content"] for c in comments], ["thanks"])

        self.client.delete(f'/api/v1/group-comments/{comment["id"]}')
        self.assertEqual(GroupPost.objects.get(id=post_id).comments_count, 0)

    def test_group_list(self):
        self.create_group(self.ada, name="First")
        self.create_group(self.bob, name="Second")
        self.client.logout()
        names = [g["name"] for g in self.client.get('/api/v1/groups').json()["results"]]
        self.assertEqual(names, ["Second", "First"])
