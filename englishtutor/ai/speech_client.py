"""
Google Speech-to-Text transcription oracle (REST ``speech:recognize``).
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from englishtutor.common.exceptions import OracleError
from englishtutor.common.logger import app_logger
from .oracle import TranscriptionOracle

logger = app_logger.getChild("ai.speech")

PROVIDER = "GoogleSpeech"


class GoogleSpeechTranscriber(TranscriptionOracle):
    """
    Transcribes recorded answers with Google Cloud Speech-to-Text.

    ``audio_ref`` is either a Cloud Storage URI (``gs://...``) or
    base64-encoded audio content.
    """

    name = "google_speech"

    def __init__(
        self,
        api_key: str,
        api_base: str = "https://speech.googleapis.com/v1",
        language_code: str = "en-US",
        encoding: str = "MP3",
        sample_rate_hertz: int = 16000,
        timeout: float = 30.0
    ):
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.config: Dict[str, Any] = {
            "encoding": encoding,
            "sampleRateHertz": sample_rate_hertz,
            "languageCode": language_code,
            "audioChannelCount": 1,
            "enableAutomaticPunctuation": True,
        }
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @staticmethod
    def audio_payload(audio_ref: str) -> Dict[str, str]:
        if audio_ref.startswith("gs://"):
            return {"uri": audio_ref}
        return {"content": audio_ref}

    async def transcribe(self, audio_ref: str) -> str:
        if not audio_ref:
            raise OracleError("No audio supplied", PROVIDER)

        session = await self._get_session()
        payload = {"config": self.config, "audio": self.audio_payload(audio_ref)}
        url = f"{self.api_base}/speech:recognize"

        try:
            async with session.post(url, params={"key": self.api_key}, json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error(f"API error: {response.status}, {error_text[:500]}")
                    raise OracleError(f"Recognition failed with status {response.status}", PROVIDER,
                                      response.status)
                data = await response.json()
        except aiohttp.ClientError as e:
            raise OracleError(f"Request failed: {e}", PROVIDER, original_exception=e)

        transcripts = [
            result["alternatives"][0].get("transcript", "")
            for result in data.get("results", [])
            if result.get("alternatives")
        ]
        transcription = "\n".join(text for text in transcripts if text)
        if not transcription:
            raise OracleError("No transcription results found", PROVIDER)
        return transcription
