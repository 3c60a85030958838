import json

import pytest
from fastapi.testclient import TestClient

from studylens import main as main_module
from studylens.core.config import Settings
from studylens.main import app, get_analyzer
from studylens.services.analysis_service import AnalysisService

from conftest import FakeLLMClient, analysis_payload


@pytest.fixture
def llm():
    return FakeLLMClient(reply=json.dumps(analysis_payload()))


@pytest.fixture
def client(llm):
    app.dependency_overrides[get_analyzer] = lambda: AnalysisService(llm, Settings())
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _upload(client, content: bytes, name="notes.txt", content_type="text/plain"):
    return client.post("/api/v1/analyze", files={"file": (name, content, content_type)})


def test_health(client):
    body = client.get("/").json()
    assert body["status"] == "operational"
    assert body["service"] == "StudyLens"


def test_analyze_success(client, llm):
    response = _upload(client, b"Plants convert light into sugar.")
    assert response.status_code == 200

    body = response.json()
    assert body["status"] == "success"
    assert body["meta"]["file_name"] == "notes.txt"
    assert body["meta"]["truncated"] is False
    assert body["data"]["analysis"]["keyPoints"][0] == "Point 1"
    assert body["data"]["analysis"]["quiz"][1]["correctAnswer"] == 1
    assert body["data"]["views"]["summary"]["tab"] == "summary"
    assert body["data"]["views"]["overview"]["quiz_questions"] == 5
    assert len(llm.calls) == 1


def test_analyze_rejects_unsupported_type(client, llm):
    response = _upload(client, b"\x89PNG", name="image.png", content_type="image/png")
    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert llm.calls == []


def test_analyze_rejects_oversized_file(client, llm, monkeypatch):
    monkeypatch.setattr(main_module.settings, "MAX_FILE_SIZE_MB", 1)
    response = _upload(client, b"x" * (1024 * 1024 + 1))

    assert response.status_code == 413
    body = response.json()
    assert body["status"] == "error"
    assert body["message"].startswith("File too large")
    assert llm.calls == []


def test_analyze_rejects_blank_text(client, llm):
    response = _upload(client, b"   \n  ")
    assert response.status_code == 422
    assert response.json()["message"] == "The document contains no extractable text."
    assert llm.calls == []


def test_analyze_reports_bad_model_reply(client, llm):
    llm.reply = "not json at all"
    response = _upload(client, b"Some text")
    assert response.status_code == 502
    assert response.json()["message"] == "Failed to analyze the document. Please try again."


def test_service_usable_after_failure(client, llm):
    llm.reply = ""
    assert _upload(client, b"Some text").status_code == 502

    llm.reply = json.dumps(analysis_payload())
    assert _upload(client, b"Some text").status_code == 200


# ── Quiz flow ────────────────────────────────────────────────────────────────

def test_quiz_round_trip(client):
    quiz = analysis_payload()["quiz"]
    correct = [q["correctAnswer"] for q in quiz]

    state = client.post("/api/v1/quiz/start", json={"quiz": quiz}).json()
    assert state["view"]["tab"] == "quiz"

    for i, option in enumerate(correct[:3] + [(c + 1) % 4 for c in correct[3:]]):
        state = client.post(
            "/api/v1/quiz/select",
            json={"quiz": quiz, "session": state["session"], "optionIndex": option},
        ).json()
        assert state["session"]["selectedAnswers"][str(i)] == option
        state = client.post(
            "/api/v1/quiz/advance", json={"quiz": quiz, "session": state["session"]}
        ).json()

    assert state["session"]["completed"] is True
    assert state["view"]["tab"] == "results"
    assert state["result"]["correct"] == 3
    assert state["result"]["band"] == "good"

    state = client.post(
        "/api/v1/quiz/restart", json={"quiz": quiz, "session": state["session"]}
    ).json()
    assert state["session"]["currentQuestionIndex"] == 0
    assert state["session"]["selectedAnswers"] == {}
    assert state["result"] is None


def test_quiz_select_after_completion_conflicts(client):
    quiz = analysis_payload()["quiz"]
    session = {"currentQuestionIndex": 4, "selectedAnswers": {}, "completed": True, "total": 5}
    response = client.post(
        "/api/v1/quiz/select",
        json={"quiz": quiz, "session": session, "optionIndex": 0},
    )
    assert response.status_code == 409
    assert response.json()["status"] == "error"


def test_quiz_retreat_at_start_is_noop(client):
    quiz = analysis_payload()["quiz"]
    state = client.post("/api/v1/quiz/start", json={"quiz": quiz}).json()
    state = client.post(
        "/api/v1/quiz/retreat", json={"quiz": quiz, "session": state["session"]}
    ).json()
    assert state["session"]["currentQuestionIndex"] == 0


@pytest.mark.parametrize("answers", [{"0": 9}, {"0": -1}, {"7": 1}])
def test_quiz_results_reject_out_of_range_answers(client, answers):
    quiz = analysis_payload()["quiz"]
    session = {"currentQuestionIndex": 4, "selectedAnswers": answers, "completed": True, "total": 5}
    response = client.post("/api/v1/quiz/results", json={"quiz": quiz, "session": session})

    assert response.status_code == 409
    assert response.json()["status"] == "error"


def test_run_serves_app_with_uvicorn(monkeypatch):
    served = {}
    monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kw: served.update(app=app, **kw))

    main_module.run()

    assert served["app"] == "studylens.main:app"
    assert served["port"] == main_module.settings.PORT
