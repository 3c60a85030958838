"""
StudyLens — Views
==================
Read-only renderers for each tab. Every function is a pure function of the
analysis / session it is given and returns a JSON-ready dict. Quiz sessions
must already have passed ``quiz_service.check_matches``.
"""

from typing import Sequence

from studylens.schemas.analysis import DocumentAnalysis, QuizQuestion
from studylens.schemas.quiz import QuizSession
from studylens.services import quiz_service

NEXT_STEPS = [
    "Read the summary for an overview",
    "Reflect on the suggested questions",
    "Test your knowledge with the quiz",
    "Review the points you found difficult",
]


def summary_view(analysis: DocumentAnalysis, file_name: str) -> dict:
    return {
        "tab": "summary",
        "file_name": file_name,
        "difficulty": analysis.difficulty.value,
        "summary": analysis.summary,
        "word_count": len(analysis.summary.split()),
        "key_points": [
            {"number": i, "text": point}
            for i, point in enumerate(analysis.key_points, start=1)
        ],
    }


def questions_view(analysis: DocumentAnalysis) -> dict:
    return {
        "tab": "questions",
        "questions": [
            {"number": i, "text": question}
            for i, question in enumerate(analysis.questions, start=1)
        ],
    }


def overview_view(analysis: DocumentAnalysis) -> dict:
    return {
        "tab": "overview",
        "key_points": len(analysis.key_points),
        "questions": len(analysis.questions),
        "quiz_questions": len(analysis.quiz),
        "difficulty": analysis.difficulty.value,
        "next_steps": list(NEXT_STEPS),
    }


def quiz_view(session: QuizSession, quiz: Sequence[QuizQuestion]) -> dict:
    """The question currently on screen, with navigation state."""
    index = session.current_question_index
    question = quiz[index]
    selected = session.selected_answers.get(index)
    is_last = index == session.total - 1

    return {
        "tab": "quiz",
        "number": index + 1,
        "total": session.total,
        "progress": (index + 1) * 100 / session.total,
        "question": question.question,
        "options": [
            {"index": i, "text": text, "selected": i == selected}
            for i, text in enumerate(question.options)
        ],
        "can_retreat": index > 0,
        # advancing without an answer is blocked here, not in the state machine
        "can_advance": selected is not None,
        "is_last": is_last,
        "advance_label": "Finish" if is_last else "Next",
    }


def results_view(session: QuizSession, quiz: Sequence[QuizQuestion]) -> dict:
    """Score plus a per-question review."""
    result = quiz_service.score(session, quiz)
    review = []
    for index, question in enumerate(quiz):
        chosen = session.selected_answers.get(index)
        review.append({
            "number": index + 1,
            "question": question.question,
            "your_answer": question.options[chosen] if chosen is not None else None,
            "correct_answer": question.options[question.correct_answer],
            "is_correct": chosen == question.correct_answer,
            "explanation": question.explanation,
        })

    return {
        "tab": "results",
        "score": result.correct,
        "total": result.total,
        "percentage": round(result.percentage),
        "band": result.band.value,
        "label": result.band.label,
        "review": review,
    }


def session_view(session: QuizSession, quiz: Sequence[QuizQuestion]) -> dict:
    if session.completed:
        return results_view(session, quiz)
    return quiz_view(session, quiz)
