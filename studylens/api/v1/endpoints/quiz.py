import logging

from fastapi import APIRouter

from studylens.schemas.quiz import (
    QuizActionRequest,
    QuizSelectRequest,
    QuizStartRequest,
    QuizStateResponse,
)
from studylens.services import quiz_service
from studylens.views import session_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["Quiz"])

# The service keeps no session state: the client posts the quiz and its
# current snapshot, and gets the next snapshot back. QuizStateError raised
# below is turned into a 409 by the application's exception handler.


def _respond(request_quiz, session) -> QuizStateResponse:
    result = quiz_service.score(session, request_quiz) if session.completed else None
    return QuizStateResponse(
        session=session,
        view=session_view(session, request_quiz),
        result=result,
    )


@router.post("/start", response_model=QuizStateResponse)
async def start_quiz(request: QuizStartRequest):
    """Begin a fresh session at the first question."""
    session = quiz_service.start(request.quiz)
    return _respond(request.quiz, session)


@router.post("/select", response_model=QuizStateResponse)
async def select_answer(request: QuizSelectRequest):
    """Record the answer for the current question."""
    quiz_service.check_matches(request.session, request.quiz)
    session = quiz_service.select(request.session, request.option_index)
    return _respond(request.quiz, session)


@router.post("/advance", response_model=QuizStateResponse)
async def advance(request: QuizActionRequest):
    """Next question, or finish from the last one."""
    quiz_service.check_matches(request.session, request.quiz)
    session = quiz_service.advance(request.session)
    return _respond(request.quiz, session)


@router.post("/retreat", response_model=QuizStateResponse)
async def retreat(request: QuizActionRequest):
    quiz_service.check_matches(request.session, request.quiz)
    session = quiz_service.retreat(request.session)
    return _respond(request.quiz, session)


@router.post("/restart", response_model=QuizStateResponse)
async def restart(request: QuizActionRequest):
    quiz_service.check_matches(request.session, request.quiz)
    session = quiz_service.restart(request.session)
    return _respond(request.quiz, session)


@router.post("/results", response_model=QuizStateResponse)
async def results(request: QuizActionRequest):
    """Score the snapshot as it stands, completed or not."""
    quiz_service.check_matches(request.session, request.quiz)
    return QuizStateResponse(
        session=request.session,
        view=session_view(request.session, request.quiz),
        result=quiz_service.score(request.session, request.quiz),
    )
