from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings

from comet import messaging_views
from comet.messaging import get_or_create_direct, total_unread_messages
from comet.models import Conversation, ConversationParticipant, Message, Notification
from comet.presence import set_typing, typing_text, typing_users
from comet.realtime import events_since

from .base import CometTestCase


class DirectConversationTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.bob = self.make_user('bob')
        self.cy = self.make_user('cy')
        self.client.force_login(self.ada)

    def open_with(self, username):
        return self.post_json('/api/v1/conversations', {"username": username})

    def test_open_conversation_is_reused(self):
        first = self.open_with('bob')
        self.assertEqual(first.status_code, 201)
        second = self.open_with('bob')
        self.assertEqual(second.status_code, 200)
        self.assertEqual(first.json()["id"], second.json()["id"])
        self.assertEqual(Conversation.objects.count(), 1)

    def test_group_chat_is_not_reused_as_direct(self):
        group = Conversation.objects.create(is_group=True, created_by=self.ada)
        ConversationParticipant.objects.create(conversation=group, user=self.ada)
        ConversationParticipant.objects.create(conversation=group, user=self.bob)
        conversation, created = get_or_create_direct(self.ada, self.bob)
        self.assertTrue(created)
        self.assertNotEqual(conversation.id, group.id)

    def test_cannot_message_self(self):
        self.assertEqual(self.open_with('ada').status_code, 400)
        self.assertEqual(self.post_json('/api/v1/conversations').status_code, 400)

    def test_send_and_read_messages(self):
        conversation_id = self.open_with('bob').json()["id"]
        url = f'/api/v1/conversations/{conversation_id}/messages'

        response = self.post_json(url, {"content": "  hello  "})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"]["content"], "hello")
        self.assertTrue(Notification.objects.filter(user=self.bob, type='message').exists())

        self.assertEqual(total_unread_messages(self.bob), 1)
        self.client.force_login(self.bob)
        listing = self.client.get('/api/v1/conversations').json()
        self.assertEqual(listing["total_unread"], 1)
        self.assertEqual(listing["results"][0]["other_user"]["username"], 'ada')
        self.assertEqual(listing["results"][0]["last_message"]["content"], "hello")

        messages = self.client.get(url).json()["results"]
        self.assertEqual([m["content"] for m in messages], ["hello"])
        self.assertEqual(total_unread_messages(self.bob), 0)

    def test_empty_message_rejected(self):
        conversation_id = self.open_with('bob').json()["id"]
        response = self.post_json(f'/api/v1/conversations/{conversation_id}/messages', {"content": " "})
        self.assertEqual(response.status_code, 400)

    def test_wrongly_typed_payloads(self):
        response = self.post_json('/api/v1/conversations', {"user_id": "abc"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "user_id must be an integer")

        conversation_id = self.open_with('bob').json()["id"]
        response = self.post_json(f'/api/v1/conversations/{conversation_id}/messages', {"content": 5})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "content must be a string")
        self.assertFalse(Message.objects.exists())

    def test_attachment_only_message(self):
        conversation_id = self.open_with('bob').json()["id"]
        response = self.post_json(f'/api/v1/conversations/{conversation_id}/messages', {
            "attachment_url": "https://cdn.example.com/cat.png",
            "attachment_type": "image",
            "attachment_name": "cat.png",
        })
        self.assertEqual(response.json()["message"]["content"], "Sent an image")

    def test_outsiders_get_404(self):
        conversation_id = self.open_with('bob').json()["id"]
        self.client.force_login(self.cy)
        self.assertEqual(self.client.get(f'/api/v1/conversations/{conversation_id}/messages').status_code, 404)

    def test_mark_read(self):
        conversation_id = self.open_with('bob').json()["id"]
        self.post_json(f'/api/v1/conversations/{conversation_id}/messages', {"content": "ping"})
        self.client.force_login(self.bob)
        self.post_json(f'/api/v1/conversations/{conversation_id}/read')
        self.assertEqual(self.client.get('/api/v1/unread-counts').json()["unread_messages_count"], 0)

    def test_recipients_get_inbox_events(self):
        conversation_id = self.open_with('bob').json()["id"]
        self.post_json(f'/api/v1/conversations/{conversation_id}/messages', {"content": "ping"})

        kinds = [e["kind"] for e in events_since(self.bob.id)]
        self.assertIn('message', kinds)
        self.assertNotIn('message', [e["kind"] for e in events_since(self.ada.id)])


class AttachmentUploadTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.client.force_login(self.ada)

    def test_upload(self):
        upload = SimpleUploadedFile("photo.PNG", b"\x89PNG fake", content_type="image/png")
        response = self.client.post('/api/v1/attachments', {"file": upload})
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["type"], 'image')
        self.assertEqual(data["name"], "photo.PNG")
        self.assertIn(f"message-attachments/{self.ada.id}/", data["url"])
        self.assertTrue(data["url"].endswith(".png"))

    def test_missing_and_oversized_files(self):
        self.assertEqual(self.client.post('/api/v1/attachments').status_code, 400)
        upload = SimpleUploadedFile("notes.txt", b"0123456789", content_type="text/plain")
        with mock.patch.object(messaging_views, 'MAX_ATTACHMENT_SIZE', 5):
            response = self.client.post('/api/v1/attachments', {"file": upload})
        self.assertEqual(response.json()["error"], "File too large (max 10MB)")


class TypingPresenceTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada', display_name="Ada")
        self.bob = self.make_user('bob', display_name="Bob")

    def test_viewer_does_not_see_self(self):
        set_typing(1, self.ada)
        self.assertEqual(typing_users(1, viewer_id=self.ada.id), [])
        self.assertEqual(typing_users(1, viewer_id=self.bob.id), [{"user_id": self.ada.id, "display_name": "Ada"}])

    def test_stop_typing(self):
        set_typing(1, self.ada)
        set_typing(1, self.ada, False)
        self.assertEqual(typing_users(1), [])

    @override_settings(TYPING_INDICATOR_TIMEOUT=0)
    def test_stale_entries_expire(self):
        set_typing(1, self.ada)
        self.assertEqual(typing_users(1), [])

    def test_typing_endpoint_and_send_clears_state(self):
        conversation, _ = get_or_create_direct(self.ada, self.bob)
        self.client.force_login(self.ada)
        self.post_json(f'/api/v1/conversations/{conversation.id}/typing', {"is_typing": True})

        self.client.force_login(self.bob)
        data = self.client.get(f'/api/v1/conversations/{conversation.id}/typing').json()
        self.assertEqual(data["text"], "Ada is typing...")

        self.client.force_login(self.ada)
        self.post_json(f'/api/v1/conversations/{conversation.id}/messages', {"content": "done"})
        self.client.force_login(self.bob)
        self.assertEqual(self.client.get(f'/api/v1/conversations/{conversation.id}/typing').json()["typing"], [])


    def test_form_encoded_false_stops_typing(self):
        conversation, _ = get_or_create_direct(self.ada, self.bob)
        url = f'/api/v1/conversations/{conversation.id}/typing'
        self.client.force_login(self.ada)
        self.client.post(url, {"is_typing": "true"})
        self.assertEqual(len(typing_users(conversation.id, viewer_id=self.bob.id)), 1)

        self.client.post(url, {"is_typing": "false"})
        self.assertEqual(typing_users(conversation.id, viewer_id=self.bob.id), [])

        response = self.client.post(url, {"is_typing": "sometimes"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "is_typing must be true or false")


class TypingTextTests(SimpleTestCase):

    def test_text(self):
        self.assertIsNone(typing_text([]))
        self.assertEqual(typing_text([{"display_name": "Ada"}]), "Ada is typing...")
        self.assertEqual(typing_text([{"display_name": "Ada"}, {"display_name": "Bob"}]), "2 people are typing...")


class GroupChatTests(CometTestCase):

    def setUp(self):
        super().setUp()
        self.ada = self.make_user('ada')
        self.bob = self.make_user('bob')
        self.cy = self.make_user('cy')
        self.client.force_login(self.ada)

    def create(self, **data):
        return self.post_json('/api/v1/group-chats', data)

    def test_needs_another_member(self):
        self.assertEqual(self.create(member_ids=[]).status_code, 400)

    def test_wrongly_typed_members(self):
        response = self.create(member_ids=str(self.bob.id))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "member_ids must be a list")

        chat_id = self.create(member_ids=[self.bob.id]).json()["id"]
        response = self.post_json(f'/api/v1/group-chats/{chat_id}/members', {"user_id": "cy"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "user_id must be an integer")

    def test_create_with_default_name(self):
        response = self.create(member_ids=[self.bob.id, self.cy.id])
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["name"], "Group Chat")
        self.assertEqual(len(response.json()["participants"]), 3)

        listed = self.client.get('/api/v1/group-chats').json()["results"]
        self.assertEqual(len(listed), 1)
        self.assertEqual(self.client.get('/api/v1/conversations').json()["results"], [])

    def test_message_notifies_all_other_members(self):
        chat_id = self.create(name="Team", member_ids=[self.bob.id, self.cy.id]).json()["id"]
        self.post_json(f'/api/v1/conversations/{chat_id}/messages', {"content": "hi all"})
        notified = set(Notification.objects.filter(type='message').values_list('user__username', flat=True))
        self.assertEqual(notified, {'bob', 'cy'})

    def test_manage_members(self):
        chat_id = self.create(name="Team", member_ids=[self.bob.id]).json()["id"]

        response = self.post_json(f'/api/v1/group-chats/{chat_id}/members', {"user_id": self.cy.id})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.post_json(f'/api/v1/group-chats/{chat_id}/members', {"user_id": self.cy.id}).status_code, 400)

        self.client.delete(f'/api/v1/group-chats/{chat_id}/members/{self.bob.id}')
        self.assertFalse(ConversationParticipant.objects.filter(conversation_id=chat_id, user=self.bob).exists())

        self.patch_json(f'/api/v1/group-chats/{chat_id}', {"name": "Renamed"})
        self.assertEqual(Conversation.objects.get(id=chat_id).name, "Renamed")

        self.post_json(f'/api/v1/group-chats/{chat_id}/leave')
        self.assertEqual(self.client.get(f'/api/v1/conversations/{chat_id}/messages').status_code, 404)
        self.assertEqual(Message.objects.count(), 0)
