"""Slug to field-name normalization.

Webflow slugs are kebab-case (`main-image`) and system keys carry a leading
underscore (`_id`, `_archived`). Populated items use camelCase keys.

Words are split on every run of non-alphanumeric characters and on case
boundaries (`fooBar`, `HTMLPage`), never between letters and digits. A later
word that starts with a digit keeps an `_` in front of it so `image-2` and
`image2` stay distinct.
"""

from __future__ import annotations

import re

_LOWER_UPPER_RE = re.compile(r"([a-z\d])([A-Z])")
_UPPER_WORD_RE = re.compile(r"([A-Z])([A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[\W_]+")


def _split_words(value: str) -> list[str]:
    value = _LOWER_UPPER_RE.sub(r"\1 \2", value)
    value = _UPPER_WORD_RE.sub(r"\1 \2", value)
    return [word for word in _SEPARATOR_RE.split(value) if word]


def _capitalize(word: str) -> str:
    head = word[:1].upper() + word[1:].lower()
    return f"_{head}" if word[:1].isdigit() else head


def normalize_field_name(slug: str) -> str:
    """Return the camelCase form of `slug`.

    >>> normalize_field_name("_id")
    'id'
    >>> normalize_field_name("created-on")
    'createdOn'
    >>> normalize_field_name("main-image-2")
    'mainImage_2'
    """

    words = _split_words(slug)
    if not words:
        return slug
    head, *rest = words
    return head.lower() + "".join(_capitalize(word) for word in rest)
