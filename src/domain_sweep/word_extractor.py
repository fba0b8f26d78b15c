"""
Extraction of candidate domain names from free text.

Used by the command line front end to accept arbitrary input on stdin;
the core only ever sees the extracted names.
"""

import re
from typing import Optional

# A run of labels, optionally starting with a dot, not glued to a preceding
# letter or digit
WORD_PATTERN = re.compile(r"(?:^|[^a-z0-9])((?:\.?[a-z0-9-]+)+)", re.IGNORECASE)

WWW_PREFIX = "www."


def extract_words(text: str) -> list[str]:
    """
    Find possible domain segments in a line of text.

    >>> extract_words("visit example.com, or foo.org!")
    ['visit', 'example.com', 'or', 'foo.org']
    """
    return WORD_PATTERN.findall(text or "")


def normalize_candidate(word: str) -> Optional[str]:
    """
    Trim a candidate, drop a leading "www." and lowercase it.

    Returns:
        The normalized name, or None if nothing is left
    """
    name = word.strip()
    if name.lower().startswith(WWW_PREFIX):
        name = name[len(WWW_PREFIX):]
    name = name.lower()
    return name or None
