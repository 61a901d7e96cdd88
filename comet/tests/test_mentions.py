from django.test import SimpleTestCase

from comet.mentions import extract_mentions, get_current_mention, parse_mentions, render_mentions


class MentionParsingTests(SimpleTestCase):

    def test_extract_mentions_are_unique_and_lowercase(self):
        self.assertEqual(extract_mentions("Hi @Ada and @bob, also @ada"), ["ada", "bob"])

    def test_extract_mentions_handles_empty_text(self):
        self.assertEqual(extract_mentions(None), [])
        self.assertEqual(extract_mentions("no mentions here"), [])

    def test_parse_mentions_reports_spans(self):
        text = "ping @ada_l now"
        [mention] = parse_mentions(text)
        self.assertEqual(mention["username"], "ada_l")
        self.assertEqual(text[mention["start"]:mention["end"]], "@ada_l")


class CurrentMentionTests(SimpleTestCase):

    def test_mention_being_typed(self):
        self.assertEqual(get_current_mention("hi @jo", 6), {"query": "jo", "start_index": 3})

    def test_mention_at_start_of_text(self):
        self.assertEqual(get_current_mention("@a", 2), {"query": "a", "start_index": 0})

    def test_bare_at_sign_gives_empty_query(self):
        self.assertEqual(get_current_mention("hey @", 5), {"query": "", "start_index": 4})

    def test_space_after_mention_ends_it(self):
        self.assertIsNone(get_current_mention("@jo hi", 6))

    def test_email_address_is_not_a_mention(self):
        self.assertIsNone(get_current_mention("mail a@b", 8))

    def test_no_at_sign(self):
        self.assertIsNone(get_current_mention("hello", 5))


class RenderMentionsTests(SimpleTestCase):

    def test_links_mentions_and_escapes_html(self):
        self.assertEqual(
            render_mentions("<b>@Ada</b>"),
            '&lt;b&gt;<a href="/profile/ada" class="mention">@Ada</a>&lt;/b&gt;',
        )
