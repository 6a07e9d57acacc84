"""ElevenLabs text-to-speech client for card audio."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

API_URL = "https://api.elevenlabs.io/v1/text-to-speech"
DEFAULT_VOICE_ID = "pNInz6obpgDQGcFmaJgB"
MODEL_ID = "eleven_multilingual_v2"
VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}


class AudioSynthesisError(RuntimeError):
    pass


class ElevenLabsClient:
    def __init__(
        self,
        api_key: str,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """Return MP3 bytes for ``text``.

        Raises:
            AudioSynthesisError: Missing API key, transport failure or API error
        """
        if not self.api_key:
            raise AudioSynthesisError("ElevenLabs API key is required")
        url = f"{API_URL}/{voice_id or DEFAULT_VOICE_ID}"
        body = {"text": text, "model_id": MODEL_ID, "voice_settings": VOICE_SETTINGS}
        try:
            response = self._http.post(url, json=body, headers={"xi-api-key": self.api_key})
        except httpx.HTTPError as e:
            raise AudioSynthesisError(f"Error generating audio: {e}") from e
        if not response.is_success:
            raise AudioSynthesisError(f"ElevenLabs API error: {response.text}")
        logger.info("Generated %d bytes of audio for: %s", len(response.content), text)
        return response.content
