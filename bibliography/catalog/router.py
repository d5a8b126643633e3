"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET  /books            : list entries, filtered by ``q`` and sorted by ``sort``
- GET  /books/{book_id}  : get one entry
- GET  /sort-orders      : the sort orders in the order the sort button cycles
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from .schemas import CatalogEntry, CatalogListing, SortOption
from .store import DEFAULT_SORT, SORT_LABELS, SORT_ORDERS, CatalogSnapshot, SortOrder, search_entries

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_catalog(request: Request) -> CatalogSnapshot:
    """Snapshot loaded at startup and kept on the application state."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        return CatalogSnapshot()
    return catalog


@router.get("/books", response_model=CatalogListing)
def list_books(
    q: Optional[str] = Query(default=None, description="Search title, author or year"),
    sort: SortOrder = Query(default=DEFAULT_SORT, description="Sort order"),
    catalog: CatalogSnapshot = Depends(get_catalog),
) -> CatalogListing:
    items = search_entries(catalog, q, sort)
    return CatalogListing(
        query=(q or "").strip(),
        sort=sort,
        sort_label=SORT_LABELS[sort],
        total=len(items),
        items=items,
    )


@router.get("/books/{book_id}", response_model=CatalogEntry)
def get_book(book_id: str, catalog: CatalogSnapshot = Depends(get_catalog)) -> CatalogEntry:
    book = catalog.get(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.get("/sort-orders", response_model=List[SortOption])
def list_sort_orders() -> List[SortOption]:
    return [SortOption(value=order, label=SORT_LABELS[order]) for order in SORT_ORDERS]
