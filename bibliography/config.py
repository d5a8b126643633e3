# bibliography/config.py
"""
Runtime settings for the catalogue site.

Values come from environment variables (a local ``.env`` file is read
first, when present). Paths are resolved relative to the project root so
the build script and the API agree on where the manifest lives.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DATA = Path(__file__).resolve().parent / "data"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _path_from_env(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


class Settings(BaseModel):
    """Resolved configuration for one process."""

    covers_dir: Path = PROJECT_ROOT / "public" / "covers"
    # URL path under which the cover images are served
    covers_url_path: str = "/covers"
    mapping_file: Path = PROJECT_ROOT / "pdf-url-mappings.json"
    manifest_file: Path = PROJECT_ROOT / "data" / "books.json"
    quiz_bank_file: Path = PACKAGE_DATA / "quiz-questions.json"
    database_url: str = "sqlite:///" + str(PROJECT_ROOT / "data" / "quiz_submissions.db")
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.getenv("BIBLIO_CORS_ORIGINS")
        return cls(
            covers_dir=_path_from_env("BIBLIO_COVERS_DIR", defaults.covers_dir),
            covers_url_path=os.getenv("BIBLIO_COVERS_URL_PATH", defaults.covers_url_path),
            mapping_file=_path_from_env("BIBLIO_MAPPING_FILE", defaults.mapping_file),
            manifest_file=_path_from_env("BIBLIO_MANIFEST_FILE", defaults.manifest_file),
            quiz_bank_file=_path_from_env("BIBLIO_QUIZ_BANK_FILE", defaults.quiz_bank_file),
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            log_level=os.getenv("BIBLIO_LOG_LEVEL", defaults.log_level),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else defaults.cors_origins
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: Optional[str] = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    level_name = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level_name, format=LOG_FORMAT)
    else:
        root.setLevel(level_name)
