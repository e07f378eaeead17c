"""
URL slug derivation for course titles.
"""

import re

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    Derive a URL-safe slug.

    Lowercases, collapses every run of characters outside [a-z0-9] into a
    single hyphen and trims hyphens from both ends:

        >>> slugify("Intro to A.I!!")
        'intro-to-a-i'

    Returns an empty string when the text has no letters or digits.
    """
    return _NON_ALPHANUMERIC.sub("-", (text or "").lower()).strip("-")
