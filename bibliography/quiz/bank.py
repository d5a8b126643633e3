"""Load the static quiz question bank."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from .schemas import DIFFICULTIES, QuizQuestion

logger = logging.getLogger(__name__)

BANK_FILE = Path(__file__).resolve().parents[1] / "data" / "quiz-questions.json"


class QuizBankError(ValueError):
    """The question bank file is missing or malformed."""


class QuizBank(BaseModel):
    """Questions keyed by difficulty tier, in the order they are stored."""

    model_config = ConfigDict(frozen=True)

    easy: Tuple[QuizQuestion, ...] = ()
    medium: Tuple[QuizQuestion, ...] = ()
    hard: Tuple[QuizQuestion, ...] = ()

    @model_validator(mode="after")
    def _unique_ids_per_tier(self) -> "QuizBank":
        for difficulty in DIFFICULTIES:
            ids = [q.id for q in getattr(self, difficulty)]
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                raise ValueError(f"duplicate question ids in {difficulty!r}: {', '.join(dupes)}")
        return self

    @staticmethod
    def difficulties() -> Tuple[str, ...]:
        return DIFFICULTIES

    @staticmethod
    def is_difficulty(value: object) -> bool:
        return isinstance(value, str) and value in DIFFICULTIES

    def questions_for(self, difficulty: str) -> Tuple[QuizQuestion, ...]:
        if not self.is_difficulty(difficulty):
            raise KeyError(difficulty)
        return getattr(self, difficulty)

    def find_questions(self, question_ids: Iterable[str]) -> List[QuizQuestion]:
        """Resolve ids across every tier, in the given order; unknown ids are skipped."""
        by_id: Dict[str, QuizQuestion] = {}
        for difficulty in DIFFICULTIES:
            for question in getattr(self, difficulty):
                by_id.setdefault(question.id, question)
        return [by_id[qid] for qid in question_ids if qid in by_id]


def load_question_bank(path: Optional[Path] = None) -> QuizBank:
    """Read and validate the bank; the bundled file is used by default.

    Parameters
    ----------
    path : Optional[Path]
        Alternative bank file in the same JSON layout.

    Raises
    ------
    QuizBankError
        If the file cannot be read or does not validate.
    """
    bank_file = path or BANK_FILE
    try:
        raw = json.loads(bank_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise QuizBankError(f"Cannot read quiz question bank {bank_file}: {exc}") from exc
    try:
        bank = QuizBank.model_validate(raw)
    except ValidationError as exc:
        raise QuizBankError(f"Invalid quiz question bank {bank_file}: {exc}") from exc
    logger.info(
        "Loaded quiz bank from %s (%s)",
        bank_file,
        ", ".join(f"{d}={len(bank.questions_for(d))}" for d in DIFFICULTIES),
    )
    return bank
