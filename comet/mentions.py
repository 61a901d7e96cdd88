"""
@-mention parsing shared by posts, comments and the autocomplete endpoint.
"""

import re

from django.utils.html import escape, format_html
from django.utils.safestring import mark_safe

MENTION_REGEX = re.compile(r'@([a-zA-Z0-9_]+)')


def extract_mentions(text):
    """Unique lower-cased usernames in the order they first appear."""
    seen = []
    for match in MENTION_REGEX.finditer(text or ''):
        username = match.group(1).lower()
        if username not in seen:
            seen.append(username)
    return seen


def parse_mentions(text):
    """
    Every mention with its character span.

    Returns:
        list[dict]: [{"username": str, "start": int, "end": int}, ...]
        where text[start:end] == "@" + username
    """
    return [
        {"username": m.group(1), "start": m.start(), "end": m.end()}
        for m in MENTION_REGEX.finditer(text or '')
    ]


def get_current_mention(text, cursor):
    """
    The mention being typed at ``cursor``, or None.

    The nearest '@' before the cursor counts only when nothing but word
    characters sit between it and the cursor and it starts the text or
    follows whitespace.

    Example:
        get_current_mention("hi @jo", 6) -> {"query": "jo", "start_index": 3}
    """
    before = (text or '')[:cursor]
    at_index = before.rfind('@')
    if at_index == -1:
        return None

    query = before[at_index + 1:]
    if ' ' in query or '\n' in query:
        return None
    if at_index > 0 and not before[at_index - 1].isspace():
        return None

    return {"query": query, "start_index": at_index}


def render_mentions(text):
    """HTML-escaped text with each mention linked to its profile page."""
    parts = []
    last = 0
    text = text or ''
    for m in MENTION_REGEX.finditer(text):
        parts.append(escape(text[last:m.start()]))
        parts.append(format_html(
            '<a href="/profile/{}" class="mention">@{}</a>',
            m.group(1).lower(), m.group(1),
        ))
        last = m.end()
    parts.append(escape(text[last:]))
    return mark_safe(''.join(parts))
