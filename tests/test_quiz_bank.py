import json
from pathlib import Path

import pytest

from bibliography.quiz.bank import QuizBank, QuizBankError, load_question_bank


def _question(qid: str, correct: str = "a") -> dict:
    return {
        "id": qid,
        "question": f"Question {qid}?",
        "options": [{"id": "a", "text": "Alpha"}, {"id": "b", "text": "Bravo"}],
        "correctAnswerId": correct,
    }


def _write(tmp_path: Path, payload) -> Path:
    path = tmp_path / "bank.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_bundled_bank_loads() -> None:
    bank = load_question_bank()
    for difficulty in QuizBank.difficulties():
        questions = bank.questions_for(difficulty)
        assert questions
        for q in questions:
            assert len(q.options) >= 2
            assert q.has_option(q.correct_answer_id)


def test_questions_keep_stored_order(tmp_path: Path) -> None:
    bank = load_question_bank(_write(tmp_path, {"easy": [_question("q3"), _question("q1"), _question("q2")]}))
    assert [q.id for q in bank.questions_for("easy")] == ["q3", "q1", "q2"]
    assert bank.questions_for("hard") == ()


def test_unknown_difficulty() -> None:
    bank = QuizBank()
    with pytest.raises(KeyError):
        bank.questions_for("expert")
    assert not bank.is_difficulty("expert")
    assert not bank.is_difficulty(None)


def test_find_questions_across_tiers(tmp_path: Path) -> None:
    bank = load_question_bank(
        _write(tmp_path, {"easy": [_question("e1")], "medium": [_question("m1")], "hard": [_question("h1")]})
    )
    assert [q.id for q in bank.find_questions(["h1", "gone", "e1"])] == ["h1", "e1"]


@pytest.mark.parametrize(
    "payload",
    [
        {"easy": [_question("q1", correct="z")]},
        {"easy": [{**_question("q1"), "options": [{"id": "a", "text": "Only"}]}]},
        {"easy": [_question("q1"), _question("q1")]},
        {"easy": "not a list"},
    ],
)
def test_invalid_bank_is_rejected(tmp_path: Path, payload) -> None:
    with pytest.raises(QuizBankError):
        load_question_bank(_write(tmp_path, payload))


def test_missing_bank_file(tmp_path: Path) -> None:
    with pytest.raises(QuizBankError):
        load_question_bank(tmp_path / "absent.json")
