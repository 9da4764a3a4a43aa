"""
Generative completion clients.

Both clients expose the same coroutine:
    complete(prompt, response_format="json_object", temperature=...) -> str
and raise ExternalServiceError for missing credentials, transport failures and
non-success responses. Neither retries; that is left to the caller.
"""
import json
import re
import logging
from typing import Any, Dict, Optional

import requests
from fastapi.concurrency import run_in_threadpool
from openai import AsyncOpenAI, OpenAIError

from lookbook.config import Settings, settings as default_settings
from lookbook.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert fashion stylist. You assemble complete outfits strictly from the "
    "product ids you are given and always answer with valid JSON only."
)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class CompletionClient:
    """Interface for the generative completion service"""

    service = "completion"
    model = ""

    async def complete(
        self,
        prompt: str,
        response_format: str = "json_object",
        temperature: Optional[float] = None,
    ) -> str:
        raise NotImplementedError


class OpenAICompletionClient(CompletionClient):
    service = "OpenAI"

    def __init__(self, api_key: str, model: str = "gpt-4o", max_tokens: int = 4000, timeout: float = 90):
        if not api_key:
            raise ExternalServiceError(self.service, "OPENAI_API_KEY not set")
        self.model = model
        self.max_tokens = max_tokens
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(self, prompt, response_format="json_object", temperature=None):
        kwargs: Dict[str, Any] = {}
        if response_format == "json_object":
            kwargs["response_format"] = {"type": "json_object"}
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.info(f"Calling OpenAI {self.model} for outfit generation...")
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI error: {e}")
            raise ExternalServiceError(self.service, str(e)) from e

        if not response.choices or response.choices[0].message.content is None:
            raise ExternalServiceError(self.service, "empty completion")
        return response.choices[0].message.content


class GeminiCompletionClient(CompletionClient):
    service = "Gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", max_tokens: int = 4000, timeout: float = 90):
        if not api_key:
            raise ExternalServiceError(self.service, "GEMINI_API_KEY not set")
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    def _post(self, body: Dict[str, Any]) -> requests.Response:
        return requests.post(
            GEMINI_URL.format(model=self.model),
            params={"key": self.api_key},
            json=body,
            timeout=self.timeout,
        )

    async def complete(self, prompt, response_format="json_object", temperature=None):
        generation_config: Dict[str, Any] = {"maxOutputTokens": self.max_tokens}
        if response_format == "json_object":
            generation_config["responseMimeType"] = "application/json"
        if temperature is not None:
            generation_config["temperature"] = temperature

        body = {
            "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        logger.info(f"Calling Gemini {self.model} for outfit generation...")
        try:
            response = await run_in_threadpool(self._post, body)
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise ExternalServiceError(self.service, str(e)) from e

        if response.status_code != 200:
            logger.error(f"Gemini API error: {response.status_code} {response.text[:500]}")
            raise ExternalServiceError(self.service, f"HTTP {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"Gemini returned a non-JSON body: {response.text[:500]}")
            raise ExternalServiceError(self.service, "non-JSON response") from e

        try:
            return result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"No text in Gemini response: {json.dumps(result)[:500]}")
            raise ExternalServiceError(self.service, "response carried no candidates")


def get_completion_client(config: Optional[Settings] = None) -> CompletionClient:
    """Build the client for the configured LLM_PROVIDER"""
    config = config or default_settings
    if config.LLM_PROVIDER == "gemini":
        return GeminiCompletionClient(
            config.GEMINI_API_KEY, config.GEMINI_MODEL, config.LLM_MAX_TOKENS, config.LLM_TIMEOUT
        )
    return OpenAICompletionClient(
        config.OPENAI_API_KEY, config.OPENAI_MODEL, config.LLM_MAX_TOKENS, config.LLM_TIMEOUT
    )


def extract_json(text: str) -> Optional[Dict]:
    """
    Extract and parse a JSON object from completion text.
    Handles pure JSON, markdown code blocks, or JSON embedded in prose.

    Returns:
        Parsed JSON dict or None if nothing parses
    """
    text = (text or "").strip()
    try:
        parsed = json.loads(text)
        return parsed if isinstance(parsed, dict) else None
    except json.JSONDecodeError:
        pass

    block = re.search(r'```(?:json)?\s*(\{.*\})\s*```', text, re.DOTALL)
    if block:
        try:
            return json.loads(block.group(1))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from code block: {e}")

    # First balanced {...}
    start_idx = text.find('{')
    if start_idx != -1:
        depth = 0
        for i in range(start_idx, len(text)):
            if text[i] == '{':
                depth += 1
            elif text[i] == '}':
                depth -= 1
                if depth == 0:
                    try:
                        return json.loads(text[start_idx:i + 1])
                    except json.JSONDecodeError as e:
                        logger.warning(f"Failed to parse JSON from brace-matched text: {e}")
                    break

    logger.error(f"Failed to extract valid JSON from completion. Response text: {text[:500]}")
    return None
