import io
import json

import pytest
from starlette.datastructures import Headers, UploadFile

from studylens.schemas.analysis import DocumentAnalysis
from studylens.services.llm_client import LLMClient


def analysis_payload(quiz_size: int = 5) -> dict:
    return {
        "summary": "Photosynthesis turns light into chemical energy in plants.",
        "keyPoints": [f"Point {i}" for i in range(1, 6)],
        "questions": [f"Why does step {i} matter?" for i in range(1, 6)],
        "quiz": [
            {
                "question": f"Question {i}?",
                "options": ["A", "B", "C", "D"],
                "correctAnswer": i % 4,
                "explanation": f"Because of reason {i}.",
            }
            for i in range(quiz_size)
        ],
        "difficulty": "Intermediate",
    }


class FakeLLMClient(LLMClient):
    """Returns a canned reply and records every prompt it was sent."""

    provider = "fake"

    def __init__(self, reply=None, error: Exception = None):
        super().__init__(api_key="test-key", model="fake-model")
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, prompt, temperature, max_tokens):
        self.calls.append({"prompt": prompt, "temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


def make_upload(content: bytes, filename: str, content_type: str = "", size=None) -> UploadFile:
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(
        file=io.BytesIO(content),
        size=len(content) if size is None else size,
        filename=filename,
        headers=headers,
    )


@pytest.fixture
def payload():
    return analysis_payload()


@pytest.fixture
def analysis(payload):
    return DocumentAnalysis.model_validate(payload)


@pytest.fixture
def quiz(analysis):
    return analysis.quiz


@pytest.fixture
def fake_client(payload):
    return FakeLLMClient(reply=json.dumps(payload))
