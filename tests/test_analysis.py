"""Tests for text analysis request/response handling."""

import io
import json
import urllib.error
import urllib.request

import pytest

from chartflow.analysis import (
    SYSTEM_PROMPT,
    analyze_text,
    parse_analysis,
    strip_code_fences,
    top_recommendation,
)
from chartflow.config import PLACEHOLDER_API_KEY, Settings
from chartflow.errors import (
    AnalysisError,
    AnalysisNotConfiguredError,
    AnalysisServiceError,
    InvalidAnalysisResponseError,
)
from chartflow.models import ChartType

REPLY = {
    "title": "Regional Sales",
    "data": [{"Region": "North", "Sales": 10}, {"Region": "South", "Sales": 7}],
    "columns": ["Region", "Sales"],
    "recommendations": [
        {"type": "pie", "confidence": 85, "reason": "share of total"},
        {"type": "bar", "confidence": 70, "reason": "comparison"},
    ],
}


def _completion(content: str) -> bytes:
    return json.dumps({"choices": [{"message": {"content": content}}]}).encode()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(api_key="sk-test", home=tmp_path)


def test_strip_code_fences() -> None:
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


def test_parse_analysis() -> None:
    result = parse_analysis("```json\n" + json.dumps(REPLY) + "\n```")
    assert result.title == "Regional Sales"
    assert [r.type for r in result.recommendations] == [ChartType.PIE, ChartType.BAR]
    assert result.recommendations[0].confidence == 85
    ds = result.to_dataset()
    assert ds.columns == ["Region", "Sales"]
    assert top_recommendation(result) is ChartType.PIE


def test_missing_columns_is_invalid() -> None:
    """A reply without columns is rejected so the caller can fall back to manual entry."""

    reply = {k: v for k, v in REPLY.items() if k != "columns"}
    with pytest.raises(InvalidAnalysisResponseError, match="Invalid response format"):
        parse_analysis(json.dumps(reply))


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[1, 2]",
        json.dumps({**REPLY, "data": "rows"}),
        json.dumps({**REPLY, "columns": [1, 2]}),
        json.dumps({**REPLY, "columns": ["Region", "Region"]}),
        json.dumps({**REPLY, "title": 5}),
    ],
)
def test_malformed_replies(content) -> None:
    with pytest.raises(InvalidAnalysisResponseError):
        parse_analysis(content)


def test_unknown_recommendations_are_skipped() -> None:
    reply = {**REPLY, "recommendations": [{"type": "sankey", "confidence": 99}, {"type": "line", "confidence": 140}]}
    result = parse_analysis(json.dumps(reply))
    assert [(r.type, r.confidence) for r in result.recommendations] == [(ChartType.LINE, 100)]


def test_top_recommendation_default() -> None:
    result = parse_analysis(json.dumps({**REPLY, "recommendations": []}))
    assert top_recommendation(result) is ChartType.BAR


def test_prompt_lists_chart_types() -> None:
    assert '"treemap"' in SYSTEM_PROMPT
    assert '"heatmap"' not in SYSTEM_PROMPT


@pytest.mark.parametrize("key", ["", PLACEHOLDER_API_KEY])
def test_not_configured(tmp_path, key) -> None:
    with pytest.raises(AnalysisNotConfiguredError):
        analyze_text("some text", Settings(api_key=key, home=tmp_path))


def test_analyze_text_posts_chat_request(monkeypatch, settings) -> None:
    captured = {}

    def fake_urlopen(req, timeout):
        captured["url"] = req.full_url
        captured["auth"] = req.get_header("Authorization")
        captured["body"] = json.loads(req.data)
        return io.BytesIO(_completion(json.dumps(REPLY)))

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)
    result = analyze_text("North sold 10, South sold 7", settings)

    assert result.title == "Regional Sales"
    assert captured["url"] == settings.api_url
    assert captured["auth"] == "Bearer sk-test"
    assert captured["body"]["model"] == "gpt-4o-mini"
    assert captured["body"]["messages"][1]["content"] == "North sold 10, South sold 7"


def test_service_errors(monkeypatch, settings) -> None:
    def unauthorized(req, timeout):
        raise urllib.error.HTTPError(req.full_url, 401, "Unauthorized", {}, io.BytesIO(b"bad key"))

    monkeypatch.setattr(urllib.request, "urlopen", unauthorized)
    with pytest.raises(AnalysisServiceError, match="401"):
        analyze_text("text", settings)

    def offline(req, timeout):
        raise urllib.error.URLError("no route")

    monkeypatch.setattr(urllib.request, "urlopen", offline)
    with pytest.raises(AnalysisServiceError, match="unreachable"):
        analyze_text("text", settings)


def test_empty_completion(monkeypatch, settings) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: io.BytesIO(_completion("")))
    with pytest.raises(AnalysisError):
        analyze_text("text", settings)


@pytest.mark.parametrize(
    "body",
    [
        json.dumps({"choices": [{"message": None}]}).encode(),
        json.dumps({"choices": ["x"]}).encode(),
        json.dumps({"choices": {"a": 1}}).encode(),
        json.dumps({"choices": []}).encode(),
        json.dumps({"choices": [{"message": {"content": {"title": "t"}}}]}).encode(),
        json.dumps(["not", "an", "envelope"]).encode(),
    ],
)
def test_malformed_envelopes_are_invalid(monkeypatch, settings, body) -> None:
    """Completions without choices[0].message.content are rejected as invalid responses."""

    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: io.BytesIO(body))
    with pytest.raises(InvalidAnalysisResponseError):
        analyze_text("text", settings)


def test_undecodable_body(monkeypatch, settings) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda req, timeout: io.BytesIO(b'{"choices": "\xff\xfe\xfa"}'))
    with pytest.raises(AnalysisServiceError, match="non-JSON"):
        analyze_text("text", settings)
