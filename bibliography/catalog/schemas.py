"""
Pydantic schema definitions for the catalog module.

``CatalogEntry`` is one downloadable document as it appears in the
generated manifest. Field names follow Python conventions while the
JSON form uses the camelCase keys the front‑end reads (``coverImageUrl``
and ``pdfUrl``). Entries are frozen: the manifest is read-only once it
has been loaded.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogEntry(BaseModel):
    """A single catalogue entry.

    ``id`` is the cover filename without its extension, so it stays
    stable across rebuilds. ``year`` is only set when the filename
    followed the ``"YYYY - Author - Title"`` convention. ``pdf_url`` is
    always present: entries without a resolvable document never make it
    into the manifest.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    year: Optional[int] = None
    cover_image_url: Optional[str] = Field(default=None, alias="coverImageUrl")
    pdf_url: str = Field(min_length=1, alias="pdfUrl")

    def to_manifest(self) -> dict:
        """Serialise with manifest keys, leaving out a missing year."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SortOption(BaseModel):
    value: str
    label: str


class CatalogListing(BaseModel):
    """Result of a filtered and sorted catalogue query."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = ""
    sort: str
    sort_label: str
    total: int
    items: List[CatalogEntry]
