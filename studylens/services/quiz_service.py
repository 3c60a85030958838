"""
StudyLens — Quiz Session
=========================
Pure transitions over immutable QuizSession snapshots.

  InProgress ──select──▶ InProgress
  InProgress ──advance─▶ InProgress | Completed (from the last question)
  InProgress ──retreat─▶ InProgress (no-op at index 0)
  Completed  ──restart─▶ InProgress (answers cleared, index 0)

Whether the current question is answered before ``advance`` is the caller's
concern; these functions do not check it.
"""

import logging
from typing import Sequence

from studylens.core.exceptions import QuizStateError
from studylens.schemas.analysis import OPTIONS_PER_QUESTION, QuizQuestion
from studylens.schemas.quiz import QuizResult, QuizSession, ScoreBand

logger = logging.getLogger(__name__)

EXCELLENT_PERCENT = 80
GOOD_PERCENT = 60


def _require_in_progress(session: QuizSession, action: str) -> None:
    if session.completed:
        raise QuizStateError(f"Cannot {action}: the quiz is already completed.")


def check_matches(session: QuizSession, quiz: Sequence[QuizQuestion]) -> None:
    """
    Boundary check for a client-supplied snapshot: it must belong to a quiz of
    the same length, and every index and recorded answer must be in range.
    ``score`` and the views assume a snapshot that passed this check.
    """
    if session.total != len(quiz):
        raise QuizStateError(
            f"Session was started for {session.total} questions, quiz has {len(quiz)}."
        )
    if session.current_question_index >= session.total:
        raise QuizStateError("Current question index is out of range.")
    for question_index, option_index in session.selected_answers.items():
        if not 0 <= question_index < session.total:
            raise QuizStateError(f"Answer recorded for unknown question {question_index}.")
        if not 0 <= option_index < OPTIONS_PER_QUESTION:
            raise QuizStateError(
                f"Answer {option_index} for question {question_index} is out of range."
            )


def start(quiz: Sequence[QuizQuestion]) -> QuizSession:
    if not quiz:
        raise QuizStateError("Cannot start a quiz without questions.")
    logger.info(f"[QUIZ] New session, {len(quiz)} questions")
    return QuizSession(total=len(quiz))


def select(session: QuizSession, option_index: int) -> QuizSession:
    """Record (or overwrite) the answer for the current question."""
    _require_in_progress(session, "select an answer")
    if not 0 <= option_index < OPTIONS_PER_QUESTION:
        raise QuizStateError(f"Option index {option_index} is out of range.")

    answers = dict(session.selected_answers)
    answers[session.current_question_index] = option_index
    return session.model_copy(update={"selected_answers": answers})


def advance(session: QuizSession) -> QuizSession:
    _require_in_progress(session, "advance")
    if session.current_question_index < session.total - 1:
        return session.model_copy(
            update={"current_question_index": session.current_question_index + 1}
        )
    logger.info(f"[QUIZ] Completed with {len(session.selected_answers)}/{session.total} answered")
    return session.model_copy(update={"completed": True})


def retreat(session: QuizSession) -> QuizSession:
    _require_in_progress(session, "go back")
    if session.current_question_index == 0:
        return session
    return session.model_copy(
        update={"current_question_index": session.current_question_index - 1}
    )


def restart(session: QuizSession) -> QuizSession:
    if not session.completed:
        raise QuizStateError("Only a completed quiz can be restarted.")
    return QuizSession(total=session.total)


def band_for(correct: int, total: int) -> ScoreBand:
    # integer comparison keeps 3/5 exactly on the 60% boundary
    if correct * 100 >= EXCELLENT_PERCENT * total:
        return ScoreBand.excellent
    if correct * 100 >= GOOD_PERCENT * total:
        return ScoreBand.good
    return ScoreBand.keep_studying


def score(session: QuizSession, quiz: Sequence[QuizQuestion]) -> QuizResult:
    """Count recorded answers equal to the correct option."""
    correct = sum(
        1
        for index, question in enumerate(quiz)
        if session.selected_answers.get(index) == question.correct_answer
    )
    total = len(quiz)
    return QuizResult(
        correct=correct,
        total=total,
        percentage=correct * 100 / total,
        band=band_for(correct, total),
    )
