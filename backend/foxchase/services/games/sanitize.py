import re

from markupsafe import Markup, escape

# Elements whose body is code, not text
_RAW_TEXT_ELEMENTS = re.compile(
    r'<(script|style)\b[^>]*>.*?(?:</\1\s*>|$)', re.IGNORECASE | re.DOTALL
)


def sanitize(text) -> str:
    """Strip markup from user text and escape what is left.

    The bodies of ``<script>`` and ``<style>`` elements are dropped along
    with the tags. Non-string input sanitizes to an empty string.
    """
    if not isinstance(text, str):
        return ''
    text = _RAW_TEXT_ELEMENTS.sub('', text)
    return str(escape(Markup(text).striptags())).strip()
