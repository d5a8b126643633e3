from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pytest
from fastapi.testclient import TestClient

from bibliography.config import Settings
from bibliography.main import create_app
from bibliography.quiz.sink import SubmissionRow

COVERS = [
    "2020 - Ann Peat - Bogs of the North.jpg",
    "1990 - Carl Fen - Mire Ecology.png",
    "Loose_notes-on-mosses.webp",
    "2001 - Jane Doe - Part One - Part Two.JPEG",
    "readme.txt",
]

MAPPING = {
    "Bogs of the North": "https://example.org/bogs.pdf",
    "Mire Ecology": "https://example.org/mire.pdf",
    "Loose notes on mosses": "https://example.org/notes.pdf",
    "Part One - Part Two": "",
}


class RecordingSink:
    def __init__(self, fail: bool = False) -> None:
        self.rows: List[SubmissionRow] = []
        self.fail = fail

    def insert(self, row: SubmissionRow) -> None:
        if self.fail:
            raise RuntimeError("database unavailable")
        self.rows.append(row)


@pytest.fixture
def covers_dir(tmp_path: Path) -> Path:
    root = tmp_path / "covers"
    root.mkdir()
    for name in COVERS:
        (root / name).write_bytes(b"")
    return root


@pytest.fixture
def mapping_file(tmp_path: Path) -> Path:
    path = tmp_path / "pdf-url-mappings.json"
    path.write_text(json.dumps(MAPPING), encoding="utf-8")
    return path


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    entries = [
        {
            "id": "2020 - Ann Peat - Bogs of the North",
            "title": "Bogs of the North",
            "author": "Ann Peat",
            "year": 2020,
            "coverImageUrl": "/covers/2020%20-%20Ann%20Peat%20-%20Bogs%20of%20the%20North.jpg",
            "pdfUrl": "https://example.org/bogs.pdf",
        },
        {
            "id": "1990 - Carl Fen - Mire Ecology",
            "title": "Mire Ecology",
            "author": "Carl Fen",
            "year": 1990,
            "coverImageUrl": "/covers/1990%20-%20Carl%20Fen%20-%20Mire%20Ecology.png",
            "pdfUrl": "https://example.org/mire.pdf",
        },
        {
            "id": "Loose_notes-on-mosses",
            "title": "Loose notes on mosses",
            "author": "Unknown Author",
            "coverImageUrl": "/covers/Loose_notes-on-mosses.webp",
            "pdfUrl": "https://example.org/notes.pdf",
        },
    ]
    path = tmp_path / "books.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def settings(tmp_path: Path, manifest_file: Path) -> Settings:
    return Settings(
        covers_dir=tmp_path / "covers",
        manifest_file=manifest_file,
        database_url="sqlite:///" + str(tmp_path / "quiz.db"),
    )


@pytest.fixture
def client(settings: Settings, sink: RecordingSink):
    with TestClient(create_app(settings, sink=sink)) as test_client:
        yield test_client
