from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from studylens.schemas.analysis import QuizQuestion


class QuizSession(BaseModel):
    """
    Snapshot of a user's progress through a quiz.

    Snapshots are immutable: every transition in ``quiz_service`` returns a
    new one. ``total`` pins the snapshot to the quiz it was started for.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    current_question_index: int = Field(default=0, ge=0, alias="currentQuestionIndex")
    selected_answers: Dict[int, int] = Field(default_factory=dict, alias="selectedAnswers")
    completed: bool = False
    total: int = Field(..., ge=1)


class ScoreBand(str, Enum):
    excellent = "excellent"
    good = "good"
    keep_studying = "keep_studying"

    @property
    def label(self) -> str:
        return _BAND_LABELS[self]


_BAND_LABELS = {
    ScoreBand.excellent: "Excellent!",
    ScoreBand.good: "Good job!",
    ScoreBand.keep_studying: "Keep studying!",
}


class QuizResult(BaseModel):
    """Score of a session. Computed on demand, never stored."""

    correct: int
    total: int
    percentage: float
    band: ScoreBand


# ── Requests ─────────────────────────────────────────────────────────────────

class QuizStartRequest(BaseModel):
    quiz: List[QuizQuestion] = Field(..., min_length=1)


class QuizActionRequest(BaseModel):
    """Body for transitions that only need the quiz and the current snapshot."""

    quiz: List[QuizQuestion] = Field(..., min_length=1)
    session: QuizSession


class QuizSelectRequest(QuizActionRequest):
    option_index: int = Field(..., alias="optionIndex")

    model_config = ConfigDict(populate_by_name=True)


# ── Responses ────────────────────────────────────────────────────────────────

class QuizStateResponse(BaseModel):
    """Next snapshot plus the view of whichever quiz tab is now active."""

    status: str = "success"
    session: QuizSession
    view: dict
    result: Optional[QuizResult] = None
