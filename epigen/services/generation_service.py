import asyncio
import json
import logging
import re
from typing import Optional, Type, TypeVar
import httpx
import pydantic
from epigen.core import config
from epigen.core.errors import GenerationError, GenerationTimeoutError, MalformedDraftError

logger = logging.getLogger(__name__)

DraftT = TypeVar("DraftT", bound=pydantic.BaseModel)


def parse_draft(text: str, model: Type[DraftT]) -> DraftT:
    """Validates generated text against a draft model.

    Tolerates markdown fences or chatter around the JSON object.
    """
    json_match = re.search(r"\{.*\}", text or "", re.DOTALL)
    if not json_match:
        raise MalformedDraftError(f"No JSON object in generated {model.__name__}", body=text)
    try:
        return model.model_validate_json(json_match.group(0))
    except pydantic.ValidationError as e:
        raise MalformedDraftError(f"Invalid {model.__name__}: {e}", body=text) from e


class GeminiClient:
    """Generation backend on the Gemini generateContent REST API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: Optional[float] = None,
                 temperature: Optional[float] = None):
        self.api_key = api_key if api_key is not None else config.AI_API_KEY
        self.model_name = model or config.AI_MODEL
        self.base_url = (base_url or config.AI_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.GENERATION_TIMEOUT
        self.temperature = temperature if temperature is not None else config.AI_TEMPERATURE
        self.client = httpx.AsyncClient(timeout=self.timeout)

    def build_request_body(self, prompt: str, system_prompt: Optional[str] = None) -> dict:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": "application/json",
            },
        }
        if system_prompt:
            body["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        return body

    async def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        if not self.api_key:
            raise GenerationError("AI_API_KEY or GEMINI_API_KEY environment variable is not set")

        try:
            return await asyncio.wait_for(self._call(prompt, system_prompt), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Generation timed out after {self.timeout}s")
            raise GenerationTimeoutError(f"Generation timed out after {self.timeout}s") from e

    async def _call(self, prompt: str, system_prompt: Optional[str]) -> str:
        url = f"{self.base_url}/models/{self.model_name}:generateContent"
        try:
            response = await self.client.post(
                url,
                params={"key": self.api_key},
                json=self.build_request_body(prompt, system_prompt),
            )
        except httpx.TimeoutException:
            raise
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise GenerationError(f"Gemini request failed: {e}") from e

        if not response.is_success:
            logger.error(f"Gemini API error {response.status_code}: {response.text}")
            raise GenerationError(f"Gemini API error: {response.text}", status=response.status_code, body=response.text)

        try:
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0].get("text", "")
        except (json.JSONDecodeError, KeyError, IndexError, TypeError, AttributeError) as e:
            raise GenerationError("Invalid response format from Gemini API", status=response.status_code, body=response.text) from e

    async def close(self):
        await self.client.aclose()
