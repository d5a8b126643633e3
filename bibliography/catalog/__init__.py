"""
Catalog package for the document catalogue.

The build script (``builder``) scans the cover images, derives each
document's title, author and year from its filename (``parser``) and
writes the manifest. At serving time ``store`` loads that manifest once
and provides the filtering and sorting used by the catalogue grid, and
``router`` exposes it over HTTP.
"""

from .router import router as catalog_router  # noqa: F401
