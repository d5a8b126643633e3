"""
Build-time generation of the catalogue manifest.

The cover images directory is the source of truth: every image named
``"YYYY - Author - Title.<ext>"`` becomes a candidate entry. The
document URL for each candidate is looked up by its parsed title in the
PDF URL mapping file, and candidates without a usable URL are left out.
The manifest is regenerated from scratch on every run.

Run it with ``bibliography-build-catalog`` (or
``python -m bibliography.catalog.builder``).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

from ..config import configure_logging, get_settings
from .parser import parse_filename
from .schemas import CatalogEntry

logger = logging.getLogger(__name__)

COVER_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")


class ManifestWriteError(RuntimeError):
    """Raised when the manifest file cannot be written."""


def _is_cover(filename: str) -> bool:
    return filename.lower().endswith(COVER_EXTENSIONS)


def _strip_extension(filename: str) -> str:
    return Path(filename).stem


def list_cover_files(covers_dir: Path) -> List[str]:
    """Return the cover image filenames in ``covers_dir``, sorted.

    A missing directory is not an error: a warning is logged and an
    empty list returned, which leads to an empty manifest.

    Parameters
    ----------
    covers_dir : Path
        Directory holding the cover images. Subdirectories and files
        without an image extension are ignored.

    Returns
    -------
    List[str]
        Bare filenames (extension included) in ascending order.
    """
    try:
        names = [p.name for p in covers_dir.iterdir() if p.is_file()]
    except FileNotFoundError:
        logger.warning(
            "Covers directory not found at: %s. Ensure it exists and contains cover images.",
            covers_dir,
        )
        return []
    except NotADirectoryError:
        logger.warning("Covers path %s is not a directory.", covers_dir)
        return []
    return sorted(name for name in names if _is_cover(name))


def load_mapping(mapping_file: Path) -> Dict[str, str]:
    """Load the title → PDF URL mapping.

    A missing or malformed file gives an empty mapping (with a warning),
    which in turn filters every entry out of the manifest.

    Parameters
    ----------
    mapping_file : Path
        JSON object file keyed by book title.

    Returns
    -------
    Dict[str, str]
        Title to URL pairs; entries whose value is not a string are dropped.
    """
    try:
        with mapping_file.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.warning("PDF URL mapping file %s not found. Proceeding without mapping data.", mapping_file)
        return {}
    except (OSError, ValueError) as exc:
        logger.warning(
            "Error reading or parsing PDF URL mapping file (%s): %s. Proceeding without mapping data.",
            mapping_file,
            exc,
        )
        return {}

    if not isinstance(raw, dict):
        logger.warning("PDF URL mapping file %s is not a JSON object. Ignoring it.", mapping_file)
        return {}

    mapping = {str(k): v for k, v in raw.items() if isinstance(v, str)}
    logger.info("Loaded %d entries from %s", len(mapping), mapping_file)
    return mapping


def build_entry(
    cover_filename: str,
    mapping: Dict[str, str],
    covers_url_path: str = "/covers",
) -> Optional[CatalogEntry]:
    """Turn one cover filename into a catalogue entry.

    Lookup is an exact, case-sensitive match on the parsed title.

    Parameters
    ----------
    cover_filename : str
        Bare filename of the cover image; its stem becomes the entry id.
    mapping : Dict[str, str]
        Title to PDF URL mapping, as returned by ``load_mapping``.
    covers_url_path : str
        Public URL prefix the cover images are served under.

    Returns
    -------
    Optional[CatalogEntry]
        The entry, or ``None`` when the title has no mapping or maps to
        a blank URL.
    """
    base_name = _strip_extension(cover_filename)
    parsed = parse_filename(base_name)

    pdf_url = mapping.get(parsed.title)
    if not pdf_url or not pdf_url.strip():
        logger.debug('Skipping "%s" - no valid PDF URL found in mapping.', parsed.title)
        return None

    cover_url = f"{covers_url_path.rstrip('/')}/{quote(cover_filename, safe='')}"
    return CatalogEntry(
        id=base_name,
        title=parsed.title,
        author=parsed.author,
        year=parsed.year,
        cover_image_url=cover_url,
        pdf_url=pdf_url,
    )


def build_catalog(
    covers_dir: Path,
    mapping: Dict[str, str],
    covers_url_path: str = "/covers",
) -> List[CatalogEntry]:
    """Build the ordered list of entries for every mapped cover image.

    Parameters
    ----------
    covers_dir : Path
        Directory scanned with ``list_cover_files``.
    mapping : Dict[str, str]
        Title to PDF URL mapping.
    covers_url_path : str
        Public URL prefix for the cover images.

    Returns
    -------
    List[CatalogEntry]
        One entry per distinct base name, in cover filename order.
    """
    return _entries_for(list_cover_files(covers_dir), mapping, covers_url_path)


def _entries_for(
    cover_filenames: Iterable[str],
    mapping: Dict[str, str],
    covers_url_path: str,
) -> List[CatalogEntry]:
    entries: List[CatalogEntry] = []
    seen: Dict[str, str] = {}
    for filename in cover_filenames:
        base_name = _strip_extension(filename)
        if base_name in seen:
            # Ids must be unique; the first cover in sorted order wins.
            logger.warning(
                'Skipping cover "%s" - "%s" already provides id "%s".',
                filename,
                seen[base_name],
                base_name,
            )
            continue
        seen[base_name] = filename
        entry = build_entry(filename, mapping, covers_url_path)
        if entry is not None:
            entries.append(entry)
    return entries


def write_manifest(entries: Iterable[CatalogEntry], output_file: Path) -> None:
    """Write the manifest as a pretty-printed top-level JSON array.

    Parameters
    ----------
    entries : Iterable[CatalogEntry]
        Entries to serialise, in manifest order.
    output_file : Path
        Destination; missing parent directories are created.

    Raises
    ------
    ManifestWriteError
        If the file cannot be written.
    """
    payload = [entry.to_manifest() for entry in entries]
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with output_file.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
    except OSError as exc:
        raise ManifestWriteError(f"Failed to write book data to {output_file}: {exc}") from exc


def _build_arg_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="bibliography-build-catalog",
        description="Generate the catalogue manifest from the cover images and PDF URL mapping.",
    )
    parser.add_argument("--covers-dir", type=Path, default=settings.covers_dir)
    parser.add_argument("--mapping-file", type=Path, default=settings.mapping_file)
    parser.add_argument("--output", type=Path, default=settings.manifest_file)
    parser.add_argument("--covers-url-path", default=settings.covers_url_path)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)

    logger.info("Starting book data generation using covers and PDF URL mapping...")
    mapping = load_mapping(args.mapping_file)
    covers = list_cover_files(args.covers_dir)
    entries = _entries_for(covers, mapping, args.covers_url_path)
    logger.info(
        "Generated data for %d books with valid PDF URLs (%d covers scanned, %d skipped).",
        len(entries),
        len(covers),
        len(covers) - len(entries),
    )

    try:
        write_manifest(entries, args.output)
    except ManifestWriteError as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Successfully wrote book data to %s", args.output)
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
