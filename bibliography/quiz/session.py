"""
Quiz session flow: pick a difficulty, answer, submit, review.

``QuizSession`` holds one visitor's attempt. Submitting scores the
answers, forwards the result to the logging endpoint (best effort) and
hands it to the review step through session storage. Only the storage
write can stop the flow: without it there is nothing to review.
"""

from __future__ import annotations

import enum
import json
import logging
import urllib.request
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError
from typing_extensions import Protocol

from .bank import QuizBank
from .schemas import QuizQuestion, QuizSubmission, score_percentage

logger = logging.getLogger(__name__)

RESULTS_KEY = "quizResults"


class QuizState(str, enum.Enum):
    SELECTING_DIFFICULTY = "selecting_difficulty"
    ANSWERING_QUESTIONS = "answering_questions"
    SUBMITTING = "submitting"
    REVIEWING = "reviewing"


class InvalidTransition(RuntimeError):
    """The requested action is not allowed in the current state."""


class ResultsNotSaved(RuntimeError):
    """The results could not be stored for the review step."""


class SessionStore(Protocol):
    """Per-visitor key/value storage with string values."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemorySessionStore:
    """``SessionStore`` kept in a plain dict."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


def score_answers(questions: Sequence[QuizQuestion], answers: Mapping[str, Optional[str]]) -> int:
    """Count questions whose stored answer is the correct option."""
    return sum(1 for q in questions if answers.get(q.id) and answers.get(q.id) == q.correct_answer_id)


def post_submission(url: str, submission: QuizSubmission, timeout: float = 10) -> None:
    """POST the submission as JSON to the logging endpoint."""
    body = json.dumps(submission.to_payload()).encode("utf-8")
    request = urllib.request.Request(
        url,
        data=body,
        method="POST",
        headers={"Content-Type": "application/json", "Accept": "application/json"},
    )
    with urllib.request.urlopen(request, timeout=timeout) as response:
        if not 200 <= response.status < 300:
            logger.error("API log request failed: %s", response.status)


class QuizSession:
    """State machine for a single quiz attempt."""

    def __init__(
        self,
        bank: QuizBank,
        store: SessionStore,
        send_log: Optional[Callable[[QuizSubmission], None]] = None,
    ) -> None:
        self.bank = bank
        self.store = store
        self.send_log = send_log
        self.state = QuizState.SELECTING_DIFFICULTY
        self.difficulty: Optional[str] = None
        self.questions: List[QuizQuestion] = []
        self.answers: Dict[str, str] = {}

    def _require(self, *states: QuizState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransition(f"not allowed in state {self.state.value} (expected {allowed})")

    def select_difficulty(self, difficulty: str) -> List[QuizQuestion]:
        """Start (or restart) the quiz at ``difficulty``, clearing answers."""
        self._require(QuizState.SELECTING_DIFFICULTY, QuizState.ANSWERING_QUESTIONS, QuizState.REVIEWING)
        if not self.bank.is_difficulty(difficulty):
            raise InvalidTransition(f"unknown difficulty: {difficulty!r}")
        self.difficulty = difficulty
        self.questions = list(self.bank.questions_for(difficulty))
        self.answers = {}
        self.state = QuizState.ANSWERING_QUESTIONS
        return self.questions

    def restart(self) -> None:
        """Back to difficulty selection, dropping the current attempt."""
        self.difficulty = None
        self.questions = []
        self.answers = {}
        self.state = QuizState.SELECTING_DIFFICULTY

    def answer(self, question_id: str, option_id: str) -> None:
        """Select (or change) the answer to one question."""
        self._require(QuizState.ANSWERING_QUESTIONS)
        question = next((q for q in self.questions if q.id == question_id), None)
        if question is None:
            raise ValueError(f"question {question_id!r} is not part of this quiz")
        if not question.has_option(option_id):
            raise ValueError(f"option {option_id!r} is not an option of question {question_id!r}")
        self.answers[question_id] = option_id

    def submit(self) -> QuizSubmission:
        """Score, log and store the attempt, then move on to reviewing.

        Raises ``ResultsNotSaved`` when the session store rejects the
        write; the session then stays on the questions with its answers.
        """
        self._require(QuizState.ANSWERING_QUESTIONS)
        if not self.questions or self.difficulty is None:
            raise InvalidTransition("there are no questions to submit")

        self.state = QuizState.SUBMITTING
        submission = QuizSubmission(
            score=score_answers(self.questions, self.answers),
            total_questions=len(self.questions),
            difficulty=self.difficulty,
            user_answers=dict(self.answers),
            question_ids=[q.id for q in self.questions],
        )

        if self.send_log is not None:
            try:
                self.send_log(submission)
            except Exception as exc:
                logger.error("Error sending log data to API: %s", exc)

        try:
            self.store.set_item(RESULTS_KEY, json.dumps(submission.to_payload()))
        except Exception as exc:
            logger.error("Failed to save results to session storage: %s", exc)
            self.state = QuizState.ANSWERING_QUESTIONS
            raise ResultsNotSaved("Could not save quiz results locally. Please try again.") from exc

        self.state = QuizState.REVIEWING
        return submission


class ReviewItem(BaseModel):
    number: int
    question_id: str
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None
    further_reading: Optional[str] = None


class QuizReview(BaseModel):
    difficulty: str
    score: float
    total_questions: float
    percentage: int
    score_band: str
    items: List[ReviewItem]


def score_band(percent: int) -> str:
    if percent >= 75:
        return "high"
    if percent >= 40:
        return "medium"
    return "low"


def load_review(store: SessionStore, bank: QuizBank) -> Optional[QuizReview]:
    """Read the stored results and rebuild the review screen.

    Returns ``None`` when nothing usable is stored; the caller should
    send the visitor back to difficulty selection.
    """
    raw = store.get_item(RESULTS_KEY)
    if raw is None:
        return None
    try:
        submission = QuizSubmission.model_validate_json(raw)
    except ValidationError as exc:
        logger.error("Failed to parse results from session storage: %s", exc)
        store.remove_item(RESULTS_KEY)
        return None

    questions = bank.find_questions(submission.question_ids)
    if not questions:
        return None

    items: List[ReviewItem] = []
    for number, question in enumerate(questions, start=1):
        chosen = submission.user_answers.get(question.id)
        items.append(
            ReviewItem(
                number=number,
                question_id=question.id,
                question=question.question,
                user_answer=question.option_text(chosen),
                correct_answer=question.option_text(question.correct_answer_id),
                is_correct=chosen == question.correct_answer_id,
                explanation=question.explanation,
                further_reading=question.further_reading,
            )
        )

    percent = score_percentage(submission.score, submission.total_questions)
    return QuizReview(
        difficulty=submission.difficulty,
        score=submission.score,
        total_questions=submission.total_questions,
        percentage=percent,
        score_band=score_band(percent),
        items=items,
    )
