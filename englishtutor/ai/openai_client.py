"""
OpenAI Scoring Oracle

Scores answers through the chat completions REST endpoint in JSON mode.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from englishtutor.common.exceptions import OracleError
from englishtutor.common.logger import app_logger
from .oracle import OracleScore, Rubric, ScoringOracle

logger = app_logger.getChild("ai.openai")

PROVIDER = "OpenAI"


class OpenAIScoringOracle(ScoringOracle):
    """ScoringOracle backed by an OpenAI chat model."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        api_base: str = "https://api.openai.com/v1",
        max_tokens: int = 2000,
        temperature: float = 0.0,
        timeout: float = 30.0,
        max_retries: int = 2
    ):
        """
        Initialize the oracle.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            api_base: Base URL of the API
            max_tokens: Completion token limit
            temperature: Sampling temperature
            timeout: Per-request timeout in seconds
            max_retries: Retries on rate limiting and server errors
        """
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def score(self, prompt: str, answer_text: str, rubric: Rubric) -> OracleScore:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }
        data = await self._post("/chat/completions", payload)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise OracleError("Malformed completion response", PROVIDER, original_exception=e)
        if not content:
            raise OracleError("Completion returned no content", PROVIDER)

        try:
            result = OracleScore.model_validate(json.loads(content))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise OracleError(f"Unparseable evaluation: {e}", PROVIDER, original_exception=e)

        missing = [criterion for criterion in rubric.criteria if criterion not in result.criteria_scores]
        if missing:
            logger.warning(f"Evaluation is missing criteria {missing}")
        return result

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        session = await self._get_session()
        url = f"{self.api_base}{path}"

        for attempt in range(self.max_retries + 1):
            try:
                async with session.post(url, json=payload) as response:
                    if response.status == 200:
                        return await response.json()

                    error_text = await response.text()
                    retryable = response.status == 429 or response.status >= 500
                    if not retryable or attempt == self.max_retries:
                        logger.error(f"API error: {response.status}, {error_text[:500]}")
                        raise OracleError(
                            f"Request failed with status {response.status}", PROVIDER, response.status
                        )
            except aiohttp.ClientError as e:
                if attempt == self.max_retries:
                    raise OracleError(f"Request failed: {e}", PROVIDER, original_exception=e)

            wait_time = 2 ** attempt
            logger.info(f"Retrying in {wait_time}s, attempt {attempt + 1}/{self.max_retries}")
            await asyncio.sleep(wait_time)

        raise OracleError("Request failed", PROVIDER)
