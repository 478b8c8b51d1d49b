"""
Label formatting for classified URLs.

Turns decoded URL tokens such as "jav-uncensored" into display text
such as "Jav Uncensored".
"""

import re

from site_loader import PLACEHOLDER_RE

SEPARATORS = ('-', '_')


def _format_word(word: str) -> str:
    # Mixed-case and non-ASCII words are kept exactly as written
    if not word.isascii() or (word != word.lower() and word != word.upper()):
        return word
    return word[:1].upper() + word[1:]


def slug_to_label(token: str) -> str:
    """
    Convert a decoded slug to a human-readable label.

    Hyphens and underscores become spaces, runs of whitespace collapse and
    each lowercase ASCII word gets a capital first letter.
    "big_tits" -> "Big Tits", "iPhone-cases" -> "iPhone Cases".

    Args:
        token: Already percent-decoded token

    Returns:
        Label text (empty for an empty token)
    """
    for separator in SEPARATORS:
        token = token.replace(separator, ' ')
    return ' '.join(_format_word(word) for word in token.split())


def render_label(template: str, values: dict) -> str:
    """
    Fill a label template such as "Category: {slug}" with formatted tokens.

    Args:
        template: Label template with {name} placeholders
        values: Decoded placeholder values

    Returns:
        Rendered label
    """
    def replacer(m: re.Match) -> str:
        name = m.group(1)
        if name not in values:
            return m.group(0)
        return slug_to_label(values[name])
    return PLACEHOLDER_RE.sub(replacer, template)
