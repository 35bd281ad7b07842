"""LLM client for SubScout.

This module handles all LLM API interactions through the OpenAI SDK.
Supported providers expose OpenAI-compatible chat completion endpoints:
- Google Gemini (app analysis, post drafting, trend analysis)
- Perplexity (web-grounded subreddit discovery)
- OpenAI
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from subscout.config import get_config


# API endpoints for different providers
PROVIDER_ENDPOINTS = {
    "google": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "perplexity": "https://api.perplexity.ai",
    "openai": "https://api.openai.com/v1",
}

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


@dataclass
class LLMResponse:
    """Response from LLM API."""
    content: str
    model: str
    provider: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class LLMClientError(Exception):
    """Base exception for LLM client errors."""
    pass


class APIKeyError(LLMClientError):
    """Raised when API key is missing or invalid."""
    pass


def parse_json_response(content: str) -> Any:
    """Parse a JSON reply, falling back to the outermost {...} block.

    Raises:
        ValueError: If no JSON object can be recovered.
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    match = _JSON_BLOCK.search(content or "")
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass

    raise ValueError("LLM response did not contain valid JSON")


class LLMClient:
    """LLM client supporting multiple OpenAI-compatible providers."""

    def __init__(
        self,
        provider: str = "google",
        model: str = "gemini-2.0-flash",
        api_key: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        """Initialize LLM client.

        Args:
            provider: LLM provider (google, perplexity, openai).
            model: Model to use.
            api_key: API key. If None, loads from config.
            temperature: Generation temperature.
            max_tokens: Maximum tokens to generate.

        Raises:
            APIKeyError: If API key is not configured.
        """
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

        if api_key is None:
            api_key = get_config().llm_credentials.get_key_for_provider(provider)

        if not api_key:
            raise APIKeyError(
                f"API key not configured for provider '{provider}'. "
                f"Set the appropriate environment variable."
            )

        self._api_key = api_key
        self._client = self._create_client()

    def _create_client(self) -> OpenAI:
        base_url = PROVIDER_ENDPOINTS.get(self.provider)
        if base_url is None:
            raise LLMClientError(f"Unknown provider: {self.provider}")

        return OpenAI(
            api_key=self._api_key,
            base_url=base_url,
        )

    def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
        extra_body: dict | None = None,
    ) -> LLMResponse:
        """Generate a response from the LLM.

        Args:
            prompt: User prompt.
            system_prompt: Optional system prompt.
            temperature: Override default temperature.
            max_tokens: Override default max tokens.
            json_mode: Ask the provider for a JSON object response.
            extra_body: Provider-specific request fields.

        Returns:
            LLMResponse with generated content.

        Raises:
            LLMClientError: If generation fails.
        """
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if extra_body:
            kwargs["extra_body"] = extra_body

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature if temperature is not None else self.temperature,
                max_tokens=max_tokens or self.max_tokens,
                **kwargs,
            )

            usage = response.usage
            prompt_tokens = usage.prompt_tokens if usage else 0
            completion_tokens = usage.completion_tokens if usage else 0
            total_tokens = usage.total_tokens if usage else 0

            return LLMResponse(
                content=response.choices[0].message.content or "",
                model=self.model,
                provider=self.provider,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=total_tokens,
            )

        except Exception as e:
            raise LLMClientError(f"LLM generation failed: {e}")

    def generate_json(
        self,
        prompt: str,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Generate and parse a JSON response.

        Raises:
            LLMClientError: If generation fails or the reply is not JSON.
        """
        response = self.generate(prompt, system_prompt, **kwargs)
        try:
            return parse_json_response(response.content)
        except ValueError as e:
            raise LLMClientError(str(e))


def get_analysis_client() -> LLMClient:
    """Client for app analysis, drafting and trend analysis (Gemini by default)."""
    config = get_config()
    return LLMClient(
        provider=config.llm.analysis_provider,
        model=config.llm.analysis_model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
    )


def get_discovery_client() -> LLMClient:
    """Client for subreddit discovery (Perplexity by default)."""
    config = get_config()
    return LLMClient(
        provider=config.llm.discovery_provider,
        model=config.llm.discovery_model,
        temperature=0.2,
        max_tokens=1000,
    )
