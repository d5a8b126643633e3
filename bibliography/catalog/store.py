"""
Read-only access to the generated catalogue manifest.

``load_manifest()`` is called once at startup and returns a
``CatalogSnapshot``; the API keeps that snapshot on the application
state and hands it to the routes. Filtering and sorting never modify the
snapshot, they always build a new list.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import ValidationError
from typing_extensions import Literal

from .schemas import CatalogEntry

logger = logging.getLogger(__name__)

SortOrder = Literal["year_desc", "year_asc", "title_asc", "title_desc", "author_asc", "author_desc"]

# Cycle order of the sort button; the first one is the default.
SORT_ORDERS: Tuple[SortOrder, ...] = (
    "year_desc",
    "year_asc",
    "title_asc",
    "title_desc",
    "author_asc",
    "author_desc",
)
DEFAULT_SORT: SortOrder = "year_desc"

SORT_LABELS: Dict[str, str] = {
    "year_desc": "Year (Newest)",
    "year_asc": "Year (Oldest)",
    "title_asc": "Title (A-Z)",
    "title_desc": "Title (Z-A)",
    "author_asc": "Author (A-Z)",
    "author_desc": "Author (Z-A)",
}


class CatalogSnapshot:
    """Immutable, ordered view of the manifest entries."""

    __slots__ = ("_entries", "_by_id")

    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        self._entries: Tuple[CatalogEntry, ...] = tuple(entries)
        self._by_id: Dict[str, CatalogEntry] = {e.id: e for e in self._entries}

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return self._entries

    def get(self, entry_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(entry_id)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def load_manifest(manifest_file: Path) -> CatalogSnapshot:
    """Load the manifest written by the build script.

    A missing or unreadable manifest yields an empty snapshot so the API
    can still start; invalid individual entries are skipped.

    Parameters
    ----------
    manifest_file : Path
        Path of the JSON array produced by ``bibliography-build-catalog``.

    Returns
    -------
    CatalogSnapshot
        The valid entries, in manifest order.
    """
    try:
        with manifest_file.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.warning("Manifest %s not found; serving an empty catalogue.", manifest_file)
        return CatalogSnapshot()
    except (OSError, ValueError) as exc:
        logger.warning("Could not read manifest %s: %s; serving an empty catalogue.", manifest_file, exc)
        return CatalogSnapshot()

    if not isinstance(raw, list):
        logger.warning("Manifest %s is not a JSON array; serving an empty catalogue.", manifest_file)
        return CatalogSnapshot()

    entries: List[CatalogEntry] = []
    for item in raw:
        try:
            entries.append(CatalogEntry.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping invalid manifest entry %r: %s", item, exc)
    logger.info("Loaded %d catalogue entries from %s", len(entries), manifest_file)
    return CatalogSnapshot(entries)


def _norm(s: Optional[str]) -> str:
    """Lowercase and strip a string for comparisons."""
    return (s or "").strip().lower()


def next_sort_order(order: str) -> SortOrder:
    """Return the sort order that follows ``order`` in the cycle."""
    try:
        index = SORT_ORDERS.index(order)  # type: ignore[arg-type]
    except ValueError:
        return DEFAULT_SORT
    return SORT_ORDERS[(index + 1) % len(SORT_ORDERS)]


def filter_entries(entries: Iterable[CatalogEntry], query: Optional[str]) -> List[CatalogEntry]:
    """Keep entries whose title, author or year contains ``query``.

    Matching is a case-insensitive substring test. A blank query keeps
    everything.

    Parameters
    ----------
    entries : Iterable[CatalogEntry]
        Entries to filter; their relative order is preserved.
    query : Optional[str]
        Search text. Surrounding whitespace is ignored.

    Returns
    -------
    List[CatalogEntry]
        The matching entries.
    """
    nq = _norm(query)
    items = list(entries)
    if not nq:
        return items

    def _matches(entry: CatalogEntry) -> bool:
        if nq in entry.title.lower() or nq in entry.author.lower():
            return True
        return entry.year is not None and nq in str(entry.year)

    return [e for e in items if _matches(e)]


def _text_key(value: str) -> Tuple[str, str]:
    return (_norm(value), value)


def _year_key(entry: CatalogEntry, newest_first: bool) -> tuple:
    title = _text_key(entry.title)
    if entry.year is None:
        return (1, 0, title)
    return (0, -entry.year if newest_first else entry.year, title)


def sort_entries(entries: Iterable[CatalogEntry], order: str = DEFAULT_SORT) -> List[CatalogEntry]:
    """Return ``entries`` sorted by one of the ``SORT_ORDERS``.

    In both year orders the undated entries come last, and title breaks
    ties between entries of the same year.

    Parameters
    ----------
    entries : Iterable[CatalogEntry]
        Entries to sort. The input is not modified.
    order : str
        One of ``SORT_ORDERS``.

    Returns
    -------
    List[CatalogEntry]
        A new, sorted list.

    Raises
    ------
    ValueError
        If ``order`` is not a known sort order.
    """
    items = list(entries)
    if order == "year_desc":
        items.sort(key=lambda e: _year_key(e, newest_first=True))
    elif order == "year_asc":
        items.sort(key=lambda e: _year_key(e, newest_first=False))
    elif order == "title_asc":
        items.sort(key=lambda e: (_text_key(e.title), _text_key(e.author)))
    elif order == "title_desc":
        items.sort(key=lambda e: (_text_key(e.title), _text_key(e.author)), reverse=True)
    elif order == "author_asc":
        items.sort(key=lambda e: (_text_key(e.author), _text_key(e.title)))
    elif order == "author_desc":
        items.sort(key=lambda e: (_text_key(e.author), _text_key(e.title)), reverse=True)
    else:
        raise ValueError(f"Unknown sort order: {order!r}")
    return items


def search_entries(
    entries: Iterable[CatalogEntry],
    query: Optional[str] = None,
    order: str = DEFAULT_SORT,
) -> List[CatalogEntry]:
    """Filter then sort, as the catalogue grid displays them.

    Parameters
    ----------
    entries : Iterable[CatalogEntry]
        The full catalogue.
    query : Optional[str]
        Search text passed to ``filter_entries``.
    order : str
        Sort order passed to ``sort_entries``.
    """
    return sort_entries(filter_entries(entries, query), order)
