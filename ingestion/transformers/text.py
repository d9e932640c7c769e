"""
Text helpers shared by the WordPress and CSV importers.

All functions are pure and tolerate empty input.
"""

import math
import re

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_TAG = re.compile(r"<[^>]*>")
_DECIMAL_ENTITY = re.compile(r"&#(\d+);")
_HEX_ENTITY = re.compile(r"&#x([0-9a-f]+);", re.IGNORECASE)

# Named entities WordPress commonly emits
NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "hellip": "…",
    "mdash": "—",
    "ndash": "–",
    "lsquo": "‘",
    "rsquo": "’",
    "ldquo": "“",
    "rdquo": "”",
    "lsaquo": "‹",
    "rsaquo": "›",
    "laquo": "«",
    "raquo": "»",
}
_NAMED_ENTITY = re.compile("&(" + "|".join(NAMED_ENTITIES) + ");")

WORDS_PER_MINUTE = 200


def to_slug(text: str) -> str:
    """Lowercase, collapse every run of non [a-z0-9] into one hyphen, trim hyphens."""
    if not text:
        return ""
    return _SLUG_INVALID.sub("-", text.lower().strip()).strip("-")


def _code_point(value: int, original: str) -> str:
    if 0xD800 <= value <= 0xDFFF:
        return original
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return original


def decode_html_entities(text: str) -> str:
    """
    Decode HTML entities in plain text or HTML.

    Decimal numeric entities are decoded first, then hex ones, then the
    named table in a single pass, so "&amp;amp;" only loses one level.
    HTML structure is left untouched.
    """
    if not text:
        return text

    decoded = _DECIMAL_ENTITY.sub(lambda m: _code_point(int(m.group(1)), m.group(0)), text)
    decoded = _HEX_ENTITY.sub(lambda m: _code_point(int(m.group(1), 16), m.group(0)), decoded)
    return _NAMED_ENTITY.sub(lambda m: NAMED_ENTITIES[m.group(1)], decoded)


def strip_html(html: str) -> str:
    """Remove all tags, trim, then decode entities."""
    if not html:
        return ""
    return decode_html_entities(_TAG.sub("", html).strip())


def calculate_read_time(content: str) -> int:
    """Minutes to read at 200 words per minute, rounded up, never below 1."""
    word_count = len(strip_html(content).split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))
