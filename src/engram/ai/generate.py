"""AI derivative generation (Gemini via google-genai).

The client is created once by init_generator() and handed to the engine.
Without an API key there is no generator and generation is a no-op.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from engram.editor.model import Derivative, DerivativeType, new_derivative

log = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"

PROMPT = (
    "Generate 2 distinct study derivatives (strictly one PROBING question, "
    'one CLOZE deletion sentence) based on this concept: "{text}".'
)

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "type": {"type": "STRING", "enum": ["PROBING", "CLOZE"]},
            "text": {"type": "STRING"},
        },
        "required": ["type", "text"],
    },
}


@dataclass(frozen=True)
class AISettings:
    model: str = DEFAULT_MODEL
    api_key_env: str = DEFAULT_API_KEY_ENV

    @classmethod
    def from_config(cls, cfg: Optional[dict]) -> "AISettings":
        section = (cfg or {}).get("ai") or {}
        return cls(
            model=str(section.get("model") or DEFAULT_MODEL),
            api_key_env=str(section.get("api_key_env") or DEFAULT_API_KEY_ENV),
        )

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env) or None


class DerivativeGenerator(Protocol):
    async def generate(self, concept_text: str) -> Any: ...


class GeminiGenerator:
    """Asks Gemini for derivatives as a JSON array."""

    def __init__(self, client, model: str = DEFAULT_MODEL) -> None:
        self._client = client
        self.model = model

    async def generate(self, concept_text: str) -> list:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=PROMPT.format(text=concept_text),
            config={
                "response_mime_type": "application/json",
                "response_schema": RESPONSE_SCHEMA,
            },
        )
        raw = response.text
        if not raw:
            return []
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            log.warning("Unparsable AI response: %r", raw[:200])
            return []


def init_generator(settings: AISettings) -> Optional[GeminiGenerator]:
    api_key = settings.api_key
    if not api_key:
        log.info("No %s set; AI generation disabled", settings.api_key_env)
        return None

    from google import genai

    return GeminiGenerator(genai.Client(api_key=api_key), settings.model)


def normalize_derivatives(raw: Any) -> list[Derivative]:
    """Map an AI payload to derivatives; anything not PROBING becomes CLOZE."""
    if not isinstance(raw, list):
        return []
    out = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        kind = str(item.get("type") or "").upper()
        dtype = DerivativeType.PROBING if kind == "PROBING" else DerivativeType.CLOZE
        out.append(new_derivative(dtype, text))
    return out
