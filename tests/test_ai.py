"""AI generation: settings, response normalization and the Gemini call shape."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from engram.ai.generate import (
    DEFAULT_MODEL,
    RESPONSE_SCHEMA,
    AISettings,
    GeminiGenerator,
    init_generator,
    normalize_derivatives,
)
from engram.editor.model import DerivativeType


def _client(text):
    client = Mock()
    client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(text=text))
    return client


class TestSettings:
    def test_defaults(self):
        settings = AISettings.from_config({})
        assert settings.model == DEFAULT_MODEL
        assert settings.api_key_env == "GEMINI_API_KEY"

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "secret")
        settings = AISettings.from_config({"ai": {"model": "m", "api_key_env": "MY_KEY"}})
        assert settings.model == "m"
        assert settings.api_key == "secret"

    def test_no_key_means_no_generator(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert init_generator(AISettings()) is None


class TestNormalize:
    def test_types_are_uppercased_and_defaulted(self):
        derivatives = normalize_derivatives(
            [
                {"type": "probing", "text": "Why?"},
                {"type": "ELABORATION", "text": "more"},
                {"text": "no type"},
            ]
        )
        assert [d.type for d in derivatives] == [
            DerivativeType.PROBING,
            DerivativeType.CLOZE,
            DerivativeType.CLOZE,
        ]

    def test_malformed_payloads(self):
        assert normalize_derivatives(None) == []
        assert normalize_derivatives({"type": "CLOZE"}) == []
        assert normalize_derivatives([]) == []
        assert normalize_derivatives(["x", {"type": "CLOZE", "text": "  "}]) == []

    def test_fresh_ids(self):
        derivatives = normalize_derivatives([{"type": "CLOZE", "text": "a"}] * 2)
        assert derivatives[0].id != derivatives[1].id


class TestGeminiGenerator:
    def test_requests_json_with_schema(self):
        client = _client('[{"type": "PROBING", "text": "Q"}]')
        generator = GeminiGenerator(client, "model-x")

        result = asyncio.run(generator.generate("Gravity"))

        assert result == [{"type": "PROBING", "text": "Q"}]
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "model-x"
        assert '"Gravity"' in kwargs["contents"]
        assert kwargs["config"]["response_mime_type"] == "application/json"
        assert kwargs["config"]["response_schema"] == RESPONSE_SCHEMA

    def test_unparsable_or_empty_response(self):
        assert asyncio.run(GeminiGenerator(_client("not json")).generate("x")) == []
        assert asyncio.run(GeminiGenerator(_client("")).generate("x")) == []
