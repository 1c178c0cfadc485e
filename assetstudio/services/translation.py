"""Client for the upstream text translation service."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import httpx

from assetstudio.core.exceptions import UnparseableUpstreamResponse, UpstreamRequestFailed
from assetstudio.core.metrics import track_translation_call
from assetstudio.core.settings import settings
from assetstudio.services.json_parser import loads_lenient
from assetstudio.services.normalizer import normalize_translations

logger = logging.getLogger(__name__)

TRANSLATE_TASK = "translate_text_layers"


@dataclass(frozen=True)
class TranslationRequest:
    source_language: str
    target_languages: tuple[str, ...]
    texts: tuple[str, ...]


def build_prompt(request: TranslationRequest) -> str:
    return "\n".join(
        [
            "Translate each text into every requested target language.",
            "Return valid JSON only with the shape:",
            '{ "translations": { "<lang_code>": ["..."] } }',
            "Keep the same number and order of strings as provided.",
            f"sourceLanguage={request.source_language}",
            f"targetLanguages={','.join(request.target_languages)}",
            f"texts={json.dumps(list(request.texts), ensure_ascii=False)}",
        ]
    )


def build_payload(request: TranslationRequest) -> dict[str, Any]:
    prompt = build_prompt(request)
    return {
        "task": TRANSLATE_TASK,
        "sourceLanguage": request.source_language,
        "targetLanguages": list(request.target_languages),
        "texts": list(request.texts),
        "prompt": prompt,
        "messages": [{"role": "user", "content": prompt}],
    }


def parse_response_body(raw_text: str) -> Any:
    """Decode the upstream body, recovering an embedded object if needed."""
    parsed = loads_lenient(raw_text)
    if not isinstance(parsed, (dict, list)):
        raise UnparseableUpstreamResponse(raw_text)
    return parsed


class TranslationClient:
    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url or settings.translation_api_url
        self.timeout = timeout if timeout is not None else settings.translation_timeout_seconds
        self.transport = transport

    async def request_raw(self, request: TranslationRequest) -> str:
        """POST the translation request and return the raw response body."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=build_payload(request))
        except httpx.HTTPError as exc:
            logger.warning("translation_transport_failed error=%s", exc)
            raise UpstreamRequestFailed(None, str(exc)) from exc

        if not response.is_success:
            logger.warning(
                "translation_upstream_status",
                extra={"status": response.status_code, "body_preview": response.text[:200]},
            )
            raise UpstreamRequestFailed(response.status_code, response.text)
        return response.text

    async def translate(
        self,
        texts: Sequence[str],
        target_languages: Sequence[str],
        source_language: str | None = None,
    ) -> dict[str, list[str]]:
        """Translate `texts` into each target language.

        Returns only the languages that normalized to exactly `len(texts)`
        strings; raises when none did.
        """
        request = TranslationRequest(
            source_language=source_language or settings.source_language,
            target_languages=tuple(code for code in target_languages if code),
            texts=tuple("" if text is None else str(text) for text in texts),
        )
        if not request.target_languages or not request.texts:
            raise ValueError("Provide at least one target language and one text layer.")

        with track_translation_call():
            raw_text = await self.request_raw(request)
            payload = parse_response_body(raw_text)
            translations = normalize_translations(payload, request.target_languages, len(request.texts))

        logger.info(
            "translation_complete",
            extra={"languages": sorted(translations), "text_count": len(request.texts)},
        )
        return translations
