"""
StudyLens — Analysis Service
=============================
Turns extracted document text into a DocumentAnalysis with exactly one model
call: fixed prompt template, fixed temperature and token ceiling, no retry,
no caching. The reply must be a JSON object matching DocumentAnalysis; any
deviation is reported as AnalysisError.
"""

import json
import re
import logging
from typing import Any, Dict, Tuple

from pydantic import ValidationError as PydanticValidationError

from studylens.core.config import Settings, settings as default_settings
from studylens.core.exceptions import AnalysisError
from studylens.schemas.analysis import DocumentAnalysis
from studylens.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "..."

ANALYSIS_PROMPT_TEMPLATE = """
Analyze the following document and provide:

1. SUMMARY: A concise, informative summary (maximum 300 words)
2. KEY POINTS: 5-8 main points of the document
3. QUESTIONS: 5 open-ended questions for reflection on the content
4. QUIZ: 5 multiple-choice questions with 4 options each, indicating the correct answer and an explanation
5. DIFFICULTY: Classify as Basic, Intermediate or Advanced

Document: "{file_name}"
Content:
{content}

Respond ONLY with valid JSON:
{{
  "summary": "summary here",
  "keyPoints": ["point 1", "point 2", ...],
  "questions": ["question 1", "question 2", ...],
  "quiz": [
    {{
      "question": "question",
      "options": ["option 1", "option 2", "option 3", "option 4"],
      "correctAnswer": 0,
      "explanation": "explanation of the answer"
    }}
  ],
  "difficulty": "Basic|Intermediate|Advanced"
}}"""

GENERIC_FAILURE = "Failed to analyze the document. Please try again."


def build_prompt(content: str, file_name: str, max_chars: int) -> Tuple[str, bool]:
    """
    Fill the template with the first ``max_chars`` characters of ``content``.
    Returns (prompt, truncated); a truncated excerpt is followed by a marker.
    """
    truncated = len(content) > max_chars
    excerpt = content[:max_chars]
    if truncated:
        excerpt = f"{excerpt} {TRUNCATION_MARKER}"
    prompt = ANALYSIS_PROMPT_TEMPLATE.format(file_name=file_name, content=excerpt)
    return prompt, truncated


def clean_and_parse_json(raw_text: str) -> Dict[str, Any]:
    """
    Parse the model reply into a dict.
    1. Strip a markdown code fence (```json ... ```) if present
    2. json.loads; the top-level value must be an object
    """
    cleaned = raw_text.strip()

    fence_match = re.search(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", cleaned, re.DOTALL)
    if fence_match:
        cleaned = fence_match.group(1).strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"[ANALYSIS] JSON parse failed. Raw (first 500 chars): {raw_text[:500]}")
        raise AnalysisError(GENERIC_FAILURE, detail=f"AI returned invalid JSON: {e}")

    if not isinstance(parsed, dict):
        raise AnalysisError(GENERIC_FAILURE, detail="AI returned JSON that is not an object")
    return parsed


class AnalysisService:
    """Builds the prompt, calls the model once and validates its reply."""

    def __init__(self, client: LLMClient, settings: Settings = default_settings):
        self.client = client
        self.settings = settings

    async def analyze(self, content: str, file_name: str) -> DocumentAnalysis:
        prompt, truncated = build_prompt(content, file_name, self.settings.MAX_PROMPT_CHARS)
        logger.info(
            f"[ANALYSIS] {file_name}: {len(content)} chars"
            + (f", truncated to {self.settings.MAX_PROMPT_CHARS}" if truncated else "")
        )

        try:
            raw = await self.client.complete(
                prompt,
                temperature=self.settings.TEMPERATURE,
                max_tokens=self.settings.MAX_OUTPUT_TOKENS,
            )
        except Exception as e:
            logger.error(f"[ANALYSIS] {self.client.provider} call failed: {e}", exc_info=True)
            raise AnalysisError(GENERIC_FAILURE, detail=f"{type(e).__name__}: {str(e)[:200]}")

        if not raw or not raw.strip():
            logger.error(f"[ANALYSIS] Empty reply from {self.client.provider}")
            raise AnalysisError(GENERIC_FAILURE, detail="Empty AI response received")

        parsed = clean_and_parse_json(raw)

        try:
            analysis = DocumentAnalysis.model_validate(parsed)
        except PydanticValidationError as e:
            logger.error(f"[ANALYSIS] Reply does not match the schema: {e.error_count()} error(s)")
            raise AnalysisError(
                GENERIC_FAILURE,
                detail=f"AI response does not match the expected schema: {e.errors()[0]['msg']}",
            )

        logger.info(
            f"[ANALYSIS] ✓ {len(analysis.key_points)} key points, "
            f"{len(analysis.questions)} questions, {len(analysis.quiz)} quiz items, "
            f"{analysis.difficulty.value}"
        )
        return analysis
