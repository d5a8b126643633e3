"""
Pydantic schema definitions for the quiz module.

JSON keys follow the question bank file and the front‑end payloads
(``correctAnswerId``, ``totalQuestions`` …); attribute names are
snake_case. ``QuizSubmission`` doubles as the validator for the logging
endpoint and for results read back from session storage, so its number
and string fields are strict.
"""

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator
from typing_extensions import Literal

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES = ("easy", "medium", "hard")

Number = Union[StrictInt, StrictFloat]


class QuizOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class QuizQuestion(BaseModel):
    """One multiple-choice question of the bank."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    question: str
    options: List[QuizOption] = Field(min_length=2)
    correct_answer_id: str = Field(alias="correctAnswerId")
    explanation: Optional[str] = None
    further_reading: Optional[str] = Field(default=None, alias="furtherReading")

    @model_validator(mode="after")
    def _correct_answer_is_an_option(self) -> "QuizQuestion":
        option_ids = [o.id for o in self.options]
        if len(set(option_ids)) != len(option_ids):
            raise ValueError(f"question {self.id!r} has duplicate option ids")
        if self.correct_answer_id not in option_ids:
            raise ValueError(
                f"question {self.id!r}: correctAnswerId {self.correct_answer_id!r} is not one of its options"
            )
        return self

    def option_text(self, option_id: Optional[str]) -> str:
        if not option_id:
            return "Not Answered"
        for option in self.options:
            if option.id == option_id:
                return option.text
        return "Unknown Option"

    def has_option(self, option_id: str) -> bool:
        return any(o.id == option_id for o in self.options)


class PublicQuestion(BaseModel):
    """A question as shown while answering: no answer, no explanation."""

    id: str
    question: str
    options: List[QuizOption]

    @classmethod
    def from_question(cls, question: QuizQuestion) -> "PublicQuestion":
        return cls(id=question.id, question=question.question, options=list(question.options))


class TierSummary(BaseModel):
    difficulty: Difficulty
    question_count: int


class QuizSubmission(BaseModel):
    """A scored attempt, as posted to the logging endpoint.

    ``score`` is computed by the client and is not re-checked anywhere;
    the logged value is informational only.
    """

    model_config = ConfigDict(populate_by_name=True)

    score: Number
    total_questions: Number = Field(alias="totalQuestions")
    difficulty: Difficulty
    user_answers: Dict[str, Any] = Field(alias="userAnswers")
    question_ids: List[StrictStr] = Field(alias="questionIds")

    @model_validator(mode="after")
    def _finite_numbers(self) -> "QuizSubmission":
        # json.loads lets NaN, Infinity and arbitrarily large integers through.
        try:
            finite = math.isfinite(self.score) and math.isfinite(self.total_questions)
            if finite:
                score_percentage(self.score, self.total_questions)
        except (OverflowError, ValueError):
            finite = False
        if not finite:
            raise ValueError("score and totalQuestions must be finite numbers")
        return self

    @property
    def percentage(self) -> int:
        return score_percentage(self.score, self.total_questions)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class LogResponse(BaseModel):
    success: bool = True
    message: str = "Log processed"


def score_percentage(score: float, total: float) -> int:
    """Score as a whole percentage, halves rounded up; 0 for an empty quiz."""
    if total <= 0:
        return 0
    return math.floor((score / total) * 100 + 0.5)
