"""
Persistence of logged quiz submissions.

The logging endpoint only needs "insert one row"; ``SubmissionSink`` is
that operation, and ``SqlSubmissionSink`` implements it with SQLAlchemy
against the ``quiz_submissions`` table of ``DATABASE_URL``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, create_engine, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from typing_extensions import Protocol, TypedDict

logger = logging.getLogger(__name__)


class SubmissionRow(TypedDict):
    ip_address: str
    difficulty: str
    score: float
    total_questions: float
    percentage: int


class Base(DeclarativeBase):
    pass


class QuizSubmissionRecord(Base):
    __tablename__ = "quiz_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    ip_address: Mapped[str] = mapped_column(String)
    difficulty: Mapped[str] = mapped_column(String(16))
    score: Mapped[float] = mapped_column(Float)
    total_questions: Mapped[float] = mapped_column(Float)
    percentage: Mapped[int] = mapped_column(Integer)


class SubmissionSink(Protocol):
    def insert(self, row: SubmissionRow) -> None: ...


class SqlSubmissionSink:
    """Insert submissions through a SQLAlchemy engine."""

    def __init__(self, database_url: str, engine: Optional[Engine] = None) -> None:
        self.engine = engine or create_engine(database_url, future=True, pool_pre_ping=True)
        self._sessions = sessionmaker(bind=self.engine, autocommit=False, autoflush=False, future=True)

    def create_tables(self) -> None:
        url = self.engine.url
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(self.engine)
        logger.info("Submission table ready on %s", url.render_as_string(hide_password=True))

    def insert(self, row: SubmissionRow) -> None:
        with self._sessions() as db:
            db.add(
                QuizSubmissionRecord(
                    ip_address=row["ip_address"],
                    difficulty=row["difficulty"],
                    score=row["score"],
                    total_questions=row["total_questions"],
                    percentage=row["percentage"],
                )
            )
            db.commit()

    def dispose(self) -> None:
        self.engine.dispose()
