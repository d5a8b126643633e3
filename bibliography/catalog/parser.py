"""
Metadata derivation from structured filenames.

Cover images and documents are named ``"YYYY - Author - Title"``. This
module turns such a base name (extension already removed) into a
``ParsedName``. Titles may themselves contain ``" - "``; everything
after the author segment belongs to the title.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

DELIMITER = " - "
UNKNOWN_AUTHOR = "Unknown Author"
UNTITLED = "Untitled"

_FALLBACK_SEPARATORS = re.compile(r"[_-]")
_YEAR_TOKEN = re.compile(r"[0-9]{4}")


class ParsedName(NamedTuple):
    title: str
    author: str
    year: Optional[int] = None


def _parse_year(token: str) -> Optional[int]:
    """Return the year for a 4-character ASCII-digit token, else ``None``."""
    if not _YEAR_TOKEN.fullmatch(token):
        return None
    return int(token)


def parse_filename(name: str) -> ParsedName:
    """Derive title, author and year from a base filename.

    Never raises. Names that do not follow the convention fall back to
    the raw name with underscores and hyphens turned into spaces and an
    unknown author.
    """
    parts = name.split(DELIMITER)
    if len(parts) >= 3:
        year = _parse_year(parts[0].strip())
        if year is not None:
            author = parts[1].strip()
            title = DELIMITER.join(parts[2:]).strip()
            return ParsedName(
                title=title or UNTITLED,
                author=author or UNKNOWN_AUTHOR,
                year=year,
            )

    logger.warning('Could not parse filename format: "%s". Using fallback.', name)
    fallback_title = _FALLBACK_SEPARATORS.sub(" ", name)
    return ParsedName(title=fallback_title or UNTITLED, author=UNKNOWN_AUTHOR, year=None)
