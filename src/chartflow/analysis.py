"""Turn free-form text into a dataset plus chart recommendations via an LLM.

Talks to an OpenAI-compatible chat completions endpoint. The response must
be a JSON object with title, data, columns and recommendations; anything
else is rejected rather than partially accepted.
"""

from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field

from .config import Settings
from .errors import (
    AnalysisError,
    AnalysisNotConfiguredError,
    AnalysisServiceError,
    InvalidAnalysisResponseError,
)
from .models import ChartType, Dataset

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "data", "columns", "recommendations")

_TYPE_CHOICES = " | ".join(f'"{t.value}"' for t in ChartType if t is not ChartType.HEATMAP)

SYSTEM_PROMPT = f"""\
You extract structured, chartable data from raw text.

Return ONLY valid JSON in this exact shape:
{{
  "title": "string",
  "data": [{{"column1": value, "column2": value}}],
  "columns": ["column1", "column2"],
  "recommendations": [
    {{"type": {_TYPE_CHOICES},
     "confidence": 0-100, "reason": "brief explanation"}}
  ]
}}

Rules:
- If the text contains dates or timestamps, aggregate by time (per day, month, hour).
- Pivot categorical fields into columns so each category becomes its own series,
  e.g. [{{"month": "Jan", "North America": 100, "Europe": 80}}].
- Aim for 12-30 rows. Aggregate raw transaction lists instead of returning them.
- Include at least one text label column and one numeric column.
- Recommend 2-4 chart types, best first, with a 0-100 confidence score."""


@dataclass(frozen=True)
class Recommendation:
    type: ChartType
    confidence: int
    reason: str


@dataclass(frozen=True)
class AnalysisResult:
    title: str
    data: list[dict]
    columns: list[str]
    recommendations: list[Recommendation] = field(default_factory=list)
    raw_analysis: str = ""

    def to_dataset(self) -> Dataset:
        return Dataset(title=self.title, columns=list(self.columns), rows=[dict(r) for r in self.data])


def strip_code_fences(content: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    text = content.strip()
    m = re.match(r"^```[\w-]*[ \t]*\n?(.*?)\n?```$", text, re.S)
    return m.group(1).strip() if m else text


def _invalid(reason: str) -> InvalidAnalysisResponseError:
    return InvalidAnalysisResponseError(f"Invalid response format from AI: {reason}")


def _recommendations(items: list) -> list[Recommendation]:
    recs = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping malformed recommendation: %r", item)
            continue
        try:
            chart_type = ChartType(item.get("type"))
        except ValueError:
            logger.warning("Skipping recommendation for unknown chart type %r", item.get("type"))
            continue
        try:
            confidence = int(round(float(item.get("confidence", 0))))
        except (TypeError, ValueError):
            confidence = 0
        recs.append(Recommendation(chart_type, max(0, min(100, confidence)), str(item.get("reason", ""))))
    return recs


def parse_analysis(content: str) -> AnalysisResult:
    """Validate and parse the model's reply."""
    try:
        payload = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as exc:
        raise _invalid(f"not JSON ({exc.msg})") from exc
    if not isinstance(payload, dict):
        raise _invalid("expected a JSON object")

    missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
    if missing:
        raise _invalid(f"missing {', '.join(missing)}")
    if not isinstance(payload["title"], str):
        raise _invalid("title must be a string")
    if not isinstance(payload["data"], list) or not all(isinstance(r, dict) for r in payload["data"]):
        raise _invalid("data must be a list of objects")
    if not isinstance(payload["columns"], list) or not all(isinstance(c, str) for c in payload["columns"]):
        raise _invalid("columns must be a list of strings")
    if not isinstance(payload["recommendations"], list):
        raise _invalid("recommendations must be a list")

    result = AnalysisResult(
        title=payload["title"],
        data=payload["data"],
        columns=payload["columns"],
        recommendations=_recommendations(payload["recommendations"]),
        raw_analysis=content,
    )
    try:
        result.to_dataset()
    except ValueError as exc:
        raise _invalid(str(exc)) from exc
    return result


def request_analysis(raw_text: str, settings: Settings) -> str:
    """POST the text to the chat completions endpoint; return the reply content."""
    if not settings.api_configured:
        raise AnalysisNotConfiguredError("OpenAI API key not configured. Set OPENAI_API_KEY in the environment.")

    body = json.dumps({
        "model": settings.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": raw_text},
        ],
        "temperature": 0.3,
    }).encode()

    req = urllib.request.Request(
        settings.api_url,
        data=body,
        headers={
            "Authorization": f"Bearer {settings.api_key}",
            "content-type": "application/json",
        },
    )

    try:
        with urllib.request.urlopen(req, timeout=settings.timeout) as resp:
            result = json.load(resp)
    except urllib.error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")[:500]
        if exc.code in (401, 403):
            raise AnalysisServiceError(f"Analysis service rejected the API key ({exc.code}). {detail}") from exc
        raise AnalysisServiceError(f"Analysis service error: {exc.code} {exc.reason}. {detail}") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise AnalysisServiceError(f"Analysis service unreachable: {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise AnalysisServiceError("Analysis service returned a non-JSON body") from exc

    return _completion_content(result)


def _completion_content(result: object) -> str:
    """Pull choices[0].message.content out of a chat completion envelope."""
    choices = result.get("choices") if isinstance(result, dict) else None
    if not isinstance(choices, list) or not choices:
        raise InvalidAnalysisResponseError("Invalid response shape from the analysis service: no choices")
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise InvalidAnalysisResponseError("Invalid response shape from the analysis service: no message")
    content = message.get("content")
    if not isinstance(content, str) or not content.strip():
        raise InvalidAnalysisResponseError("No content received from the analysis service")
    return content


def analyze_text(raw_text: str, settings: Settings | None = None) -> AnalysisResult:
    settings = settings or Settings.from_env()
    try:
        result = parse_analysis(request_analysis(raw_text, settings))
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        raise
    logger.info("Analysis produced %d rows, %d recommendations", len(result.data), len(result.recommendations))
    return result


def top_recommendation(result: AnalysisResult, default: ChartType = ChartType.BAR) -> ChartType:
    return result.recommendations[0].type if result.recommendations else default
