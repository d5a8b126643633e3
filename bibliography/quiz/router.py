"""
Route definitions for the quiz API.

- GET  /api/quiz               : difficulty tiers and their question counts
- GET  /api/quiz/{difficulty}  : the tier's questions, without the answers
- POST /api/log-quiz           : log a scored attempt (best effort)
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .bank import QuizBank
from .schemas import DIFFICULTIES, LogResponse, PublicQuestion, QuizSubmission, TierSummary
from .sink import SubmissionRow, SubmissionSink

logger = logging.getLogger(__name__)

router = APIRouter(tags=["quiz"])

UNKNOWN_IP = "IP Not Found"


def get_question_bank(request: Request) -> QuizBank:
    bank = getattr(request.app.state, "quiz_bank", None)
    if bank is None:
        raise HTTPException(status_code=503, detail="Quiz bank not loaded")
    return bank


def get_submission_sink(request: Request) -> SubmissionSink:
    sink = getattr(request.app.state, "submission_sink", None)
    if sink is None:
        raise HTTPException(status_code=503, detail="Submission logging not configured")
    return sink


def client_ip(request: Request) -> str:
    """Caller address: first ``X-Forwarded-For`` hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_IP


@router.get("/api/quiz", response_model=List[TierSummary])
def list_tiers(bank: QuizBank = Depends(get_question_bank)) -> List[TierSummary]:
    return [TierSummary(difficulty=d, question_count=len(bank.questions_for(d))) for d in DIFFICULTIES]


@router.get("/api/quiz/{difficulty}", response_model=List[PublicQuestion])
def get_tier_questions(difficulty: str, bank: QuizBank = Depends(get_question_bank)) -> List[PublicQuestion]:
    if not bank.is_difficulty(difficulty):
        raise HTTPException(status_code=404, detail=f"Unknown difficulty: {difficulty}")
    return [PublicQuestion.from_question(q) for q in bank.questions_for(difficulty)]


@router.post(
    "/api/log-quiz",
    response_model=LogResponse,
    responses={400: {"description": "Malformed JSON or invalid payload"}},
)
async def log_quiz(request: Request, sink: SubmissionSink = Depends(get_submission_sink)):
    """Record a quiz attempt.

    Once the payload is valid the caller always gets a success response,
    even if the insert fails: this log is telemetry, and the score it
    stores is whatever the client sent.
    """
    logger.info("Received request to /api/log-quiz")
    try:
        try:
            data = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        try:
            submission = QuizSubmission.model_validate(data)
        except ValidationError as exc:
            logger.error("Invalid data format received: %r (%s)", data, exc.errors())
            return JSONResponse({"error": "Invalid data format"}, status_code=400)

        row = SubmissionRow(
            ip_address=client_ip(request),
            difficulty=submission.difficulty,
            score=submission.score,
            total_questions=submission.total_questions,
            percentage=submission.percentage,
        )
        try:
            sink.insert(row)
        except Exception:
            logger.exception("Quiz submission insert failed")
        else:
            logger.info("Successfully logged quiz submission.")

        return LogResponse()
    except Exception:
        logger.exception("Error processing /api/log-quiz")
        return JSONResponse({"error": "Internal Server Error"}, status_code=500)
