"""
Generative Text Model Adapters.

The pipeline treats every model as an untrusted oracle behind one call
contract:

    complete(prompt, system_prompt=None, temperature=0.3, structured=False) -> str

Failures surface as exceptions; callers decide whether a failure is fatal.
``structured=True`` biases the model toward emitting bare JSON (Gemini's
``response_mime_type``), but output is still parsed defensively downstream.

Providers:
- Gemini (google-generativeai), the default for both roles
- OpenAI chat completions
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from loguru import logger

from config import Settings, get_settings
from src.core.exceptions import ConfigurationError

DEFAULT_MAX_OUTPUT_TOKENS = 8192


@runtime_checkable
class TextModel(Protocol):
    """Call contract for a generative text model."""

    model_name: str

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        structured: bool = False,
    ) -> str:
        ...


class GeminiTextModel:
    """
    Gemini adapter.

    The SDK client is lazy-loaded on the first call; one GenerativeModel is
    kept per distinct system instruction.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash",
        timeout: float = 60.0,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ):
        if not api_key:
            raise ConfigurationError("Gemini API key required")
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens
        self._models: dict[Optional[str], object] = {}
        self._configured = False

    def _get_model(self, system_prompt: Optional[str]):
        import google.generativeai as genai

        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

        if system_prompt not in self._models:
            self._models[system_prompt] = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=system_prompt,
            )
        return self._models[system_prompt]

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        structured: bool = False,
    ) -> str:
        generation_config = {
            "temperature": temperature,
            "max_output_tokens": self.max_output_tokens,
        }
        if structured:
            generation_config["response_mime_type"] = "application/json"

        response = self._get_model(system_prompt).generate_content(
            prompt,
            generation_config=generation_config,
            request_options={"timeout": self.timeout},
        )
        text = response.text
        if not text:
            raise ValueError(f"Empty response from {self.model_name}")
        return text


class OpenAITextModel:
    """OpenAI chat-completions adapter."""

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o",
        timeout: float = 60.0,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ):
        if not api_key:
            raise ConfigurationError("OpenAI API key required")
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.max_output_tokens = max_output_tokens
        self._client = None

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        structured: bool = False,
    ) -> str:
        # JSON mode forces an object at the top level, but the pipeline asks for
        # arrays, so structured output is left to the prompt for this provider.
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.model_name,
            messages=messages,
            temperature=temperature,
            max_tokens=self.max_output_tokens,
        )
        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise ValueError(f"Empty response from {self.model_name}")
        return text


def build_text_model(
    provider: str,
    model_name: str,
    settings: Optional[Settings] = None,
) -> TextModel:
    """
    Build a model adapter for one pipeline role.

    Raises:
        ConfigurationError: unknown provider or missing API key
    """
    settings = settings or get_settings()

    if provider == "gemini":
        if not settings.gemini_api_key:
            raise ConfigurationError("Gemini not configured (GEMINI_API_KEY missing)")
        model = GeminiTextModel(
            api_key=settings.gemini_api_key,
            model_name=model_name,
            timeout=settings.llm_timeout_seconds,
        )
    elif provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OpenAI not configured (OPENAI_API_KEY missing)")
        model = OpenAITextModel(
            api_key=settings.openai_api_key,
            model_name=model_name,
            timeout=settings.llm_timeout_seconds,
        )
    else:
        raise ConfigurationError(f"Unknown model provider: {provider}")

    logger.debug(f"Built {provider} text model: {model_name}")
    return model
