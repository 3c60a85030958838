from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Difficulty(str, Enum):
    basic = "Basic"
    intermediate = "Intermediate"
    advanced = "Advanced"


# Labels the model may answer with, lower-cased, Portuguese included.
_DIFFICULTY_ALIASES = {
    "basic": Difficulty.basic,
    "básico": Difficulty.basic,
    "basico": Difficulty.basic,
    "intermediate": Difficulty.intermediate,
    "intermediário": Difficulty.intermediate,
    "intermediario": Difficulty.intermediate,
    "advanced": Difficulty.advanced,
    "avançado": Difficulty.advanced,
    "avancado": Difficulty.advanced,
}

OPTIONS_PER_QUESTION = 4


class QuizQuestion(BaseModel):
    """A multiple-choice question with exactly 4 options."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question: str
    options: List[str] = Field(..., min_length=OPTIONS_PER_QUESTION, max_length=OPTIONS_PER_QUESTION)
    correct_answer: int = Field(..., alias="correctAnswer", ge=0)
    explanation: str

    @model_validator(mode="after")
    def check_correct_answer(self) -> "QuizQuestion":
        if self.correct_answer >= len(self.options):
            raise ValueError(
                f"correctAnswer {self.correct_answer} out of range for {len(self.options)} options"
            )
        return self


class DocumentAnalysis(BaseModel):
    """Structured analysis of one uploaded document. Immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    key_points: List[str] = Field(..., alias="keyPoints")
    questions: List[str]
    quiz: List[QuizQuestion] = Field(..., min_length=1)
    difficulty: Difficulty

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalise_difficulty(cls, v):
        if isinstance(v, str):
            match = _DIFFICULTY_ALIASES.get(v.strip().lower())
            if match is not None:
                return match
        return v
