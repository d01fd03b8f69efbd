"""
Tests for diabetes_control/advisory/client.py.

All HTTP traffic goes through ``httpx.MockTransport``; no network access.

What we test
------------
AdvisoryClient.analyze():
  - sends one POST with bearer auth, model and json_object response format.
  - parses choices[0].message.content into an advisory result.
  - raises AdvisoryError for: missing key, non-2xx, transport error,
    non-JSON body, malformed envelope, non-JSON content, and wraps any
    unexpected parsing failure.

parse_advisory_content():
  - per-field defaults for absent or malformed fields.
  - area values rounded half-up and clamped; 0 is kept.
  - overall score is the rounded mean of the defaulted areas.
"""

from __future__ import annotations

import json

import httpx
import pytest

from diabetes_control.advisory.client import (
    DEFAULT_MESSAGE,
    DEFAULT_TITLE,
    AdvisoryClient,
    AdvisoryError,
    parse_advisory_content,
)
from diabetes_control.config import AdvisoryConfig
from diabetes_control.taxonomy.questionnaire_taxonomy import RecommendationTier

_FULL_ANALYSIS = {
    "tipo": "positive",
    "titulo": "Buen control",
    "mensaje": "Sus hábitos son adecuados.",
    "recomendaciones": ["Mantenga su rutina", "Revise su glucosa"],
    "area_conocimiento": 9,
    "area_medicacion": 8,
    "area_monitoreo": 8,
    "area_estilo_vida": 7,
    "glucoseInsights": "Monitoreo adecuado.",
    "medicationInsights": "Buena adherencia.",
}


def _envelope(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client(handler, api_key: str | None = "test-key") -> AdvisoryClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return AdvisoryClient(api_key=api_key, http_client=http)


# ── analyze() ─────────────────────────────────────────────────────────────────

class TestAnalyze:
    def test_success(self, moderate_answers):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_envelope(json.dumps(_FULL_ANALYSIS)))

        result = _client(handler).analyze(moderate_answers)

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == AdvisoryClient.DEFAULT_API_URL
        assert request.headers["Authorization"] == "Bearer test-key"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o"
        assert body["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in body["messages"]] == ["system", "user"]

        assert result.source == "advisory"
        assert result.tier == RecommendationTier.POSITIVE
        assert result.title == "Buen control"
        assert result.recommendations == ("Mantenga su rutina", "Revise su glucosa")
        assert result.score == 8

    def test_missing_key_makes_no_request(self, moderate_answers):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=_envelope("{}"))

        with pytest.raises(AdvisoryError, match="key"):
            _client(handler, api_key=None).analyze(moderate_answers)
        assert calls == []

    @pytest.mark.parametrize("status", [401, 429, 500])
    def test_non_2xx(self, moderate_answers, status):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"error": {"message": "nope"}})

        with pytest.raises(AdvisoryError, match=str(status)):
            _client(handler).analyze(moderate_answers)

    def test_transport_error(self, moderate_answers):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AdvisoryError):
            _client(handler).analyze(moderate_answers)

    def test_body_not_json(self, moderate_answers):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>gateway</html>")

        with pytest.raises(AdvisoryError):
            _client(handler).analyze(moderate_answers)

    @pytest.mark.parametrize(
        "envelope",
        [{}, {"choices": []}, {"choices": [{"message": {}}]}, _envelope(""), _envelope(42)],
    )
    def test_malformed_envelope(self, moderate_answers, envelope):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=envelope)

        with pytest.raises(AdvisoryError):
            _client(handler).analyze(moderate_answers)

    def test_content_not_json(self, moderate_answers):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_envelope("Lo siento, no puedo ayudar."))

        with pytest.raises(AdvisoryError):
            _client(handler).analyze(moderate_answers)

    def test_oversized_area_number_defaults(self, moderate_answers):
        content = '{"tipo": "alert", "area_conocimiento": 1' + "0" * 400 + "}"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_envelope(content))

        result = _client(handler).analyze(moderate_answers)
        assert result.tier == RecommendationTier.ALERT
        assert result.areas.knowledge == 5

    def test_unexpected_parse_error_wrapped(self, moderate_answers, monkeypatch):
        def broken_parse(content):
            raise RuntimeError("boom")

        monkeypatch.setattr(
            "diabetes_control.advisory.client.parse_advisory_content", broken_parse
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_envelope(json.dumps(_FULL_ANALYSIS)))

        with pytest.raises(AdvisoryError, match="could not be parsed"):
            _client(handler).analyze(moderate_answers)


class TestFromConfig:
    def test_reads_key_from_named_env_var(self, monkeypatch):
        monkeypatch.setenv("DC_TEST_ADVISORY_KEY", "sk-from-env")
        config = AdvisoryConfig(api_key_env="DC_TEST_ADVISORY_KEY", model="gpt-test")
        client = AdvisoryClient.from_config(config)
        assert client.api_key == "sk-from-env"
        assert client.model == "gpt-test"

    def test_missing_env_var_leaves_key_unset(self, monkeypatch):
        monkeypatch.delenv("DC_TEST_ADVISORY_KEY", raising=False)
        config = AdvisoryConfig(api_key_env="DC_TEST_ADVISORY_KEY")
        assert AdvisoryClient.from_config(config).api_key is None


# ── parse_advisory_content() ──────────────────────────────────────────────────

class TestParseAdvisoryContent:
    def test_full_payload(self):
        result = parse_advisory_content(_FULL_ANALYSIS)
        assert result.areas.as_dict() == {
            "knowledge": 9,
            "medication": 8,
            "monitoring": 8,
            "lifestyle": 7,
        }
        assert result.glucose_insights == "Monitoreo adecuado."
        assert result.max_score == 10

    def test_empty_object_gets_all_defaults(self):
        result = parse_advisory_content("{}")
        assert result.tier == RecommendationTier.WARNING
        assert result.title == DEFAULT_TITLE
        assert result.message == DEFAULT_MESSAGE
        assert result.recommendations == ()
        assert result.areas.values() == [5, 5, 5, 5]
        assert result.score == 5
        assert result.glucose_insights is None
        assert result.medication_insights is None

    def test_unknown_tier_defaults_to_warning(self):
        assert parse_advisory_content({"tipo": "excellent"}).tier == RecommendationTier.WARNING

    def test_area_values_rounded_and_clamped(self):
        result = parse_advisory_content(
            {
                "area_conocimiento": 7.5,
                "area_medicacion": 14,
                "area_monitoreo": -3,
                "area_estilo_vida": "6",
            }
        )
        assert result.areas.values() == [8, 10, 0, 6]

    def test_zero_area_is_kept(self):
        assert parse_advisory_content({"area_conocimiento": 0}).areas.knowledge == 0

    @pytest.mark.parametrize("bad", [None, True, "alto", [7], float("nan")])
    def test_non_numeric_area_defaults_to_five(self, bad):
        assert parse_advisory_content({"area_medicacion": bad}).areas.medication == 5

    def test_huge_integer_area_defaults_to_five(self):
        assert parse_advisory_content({"area_monitoreo": 10**400}).areas.monitoring == 5

    def test_overall_from_defaulted_areas(self):
        result = parse_advisory_content({"area_conocimiento": 9, "area_medicacion": 9})
        # (9 + 9 + 5 + 5) / 4 = 7
        assert result.score == 7

    def test_recommendations_filtered(self):
        result = parse_advisory_content({"recomendaciones": ["Uno", 3, "", None, "Dos"]})
        assert result.recommendations == ("Uno", "Dos")

    def test_recommendations_not_a_list(self):
        assert parse_advisory_content({"recomendaciones": "Uno"}).recommendations == ()

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", "42"])
    def test_non_object_content_raises(self, content):
        with pytest.raises(AdvisoryError):
            parse_advisory_content(content)
