import html

import bleach


def strip_markup(text: str) -> str:
    """
    Remove disallowed HTML tags from user text while keeping it plain text

    bleach entity-encodes the text it keeps ("&" becomes "&amp;"), which would make
    a stored comment differ from what the user typed, so the entities are decoded
    again. The result is plain text and must be escaped wherever it is rendered.
    """
    return html.unescape(bleach.clean(text, strip=True))
