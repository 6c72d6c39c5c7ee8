"""strip_markup: tags removed, the typed characters kept as typed."""

import pytest

from utils.text import strip_markup


@pytest.mark.parametrize("text", [
    "Tom & Jerry say 1 < 2",
    'She said "hi" & it\'s > fine',
])
def test_plain_text_is_unchanged(text):
    assert strip_markup(text) == text


def test_disallowed_tags_are_removed():
    assert strip_markup("<script>alert(1)</script>ok") == "alert(1)ok"
    assert strip_markup("<h1>Hi</h1> & bye") == "Hi & bye"
