"""LLM translator client supporting Google GenAI (Gemini), OpenAI-compatible APIs, and Ollama."""
from __future__ import annotations

import logging
from typing import Callable, Optional

import openai
from openai import AsyncOpenAI

from ..config import settings
from ..database import KeyValueStore, get_store
from ..exceptions import AuthError, TransportError

log = logging.getLogger(__name__)

# Runtime-overridable settings (set via /api/settings/llm endpoint)
_runtime: dict = {}

# Gemini answers an invalid key with 400 API_KEY_INVALID
_GEMINI_AUTH_CODES = (400, 401, 403)


def configure(provider: str, base_url: str, model: str, temperature: float = 0.3) -> None:
    _runtime.update(
        provider=provider,
        base_url=base_url,
        model=model,
        temperature=temperature,
    )


def _provider() -> str:
    return _runtime.get("provider", settings.llm_provider)


def _base_url() -> str:
    return _runtime.get("base_url", settings.llm_base_url)


def _model() -> str:
    return _runtime.get("model", settings.llm_model)


def _temperature() -> float:
    return _runtime.get("temperature", settings.llm_temperature)


# ── Gemini (native google-genai SDK) ────────────────────────────────────

async def _chat_gemini(api_key: str, system_prompt: str, user_prompt: str) -> str:
    from google import genai
    from google.genai import errors, types

    client = genai.Client(api_key=api_key)
    model = _model()

    log.info("Gemini call  model=%s  sys_len=%d  user_len=%d",
             model, len(system_prompt), len(user_prompt))

    try:
        response = await client.aio.models.generate_content(
            model=model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                temperature=_temperature(),
                max_output_tokens=settings.llm_max_tokens,
            ),
        )
    except errors.APIError as e:
        if e.code in _GEMINI_AUTH_CODES:
            raise AuthError("Gemini API key is invalid", code=str(e.code)) from e
        raise TransportError(f"Gemini API error ({e.code}): {e.message}", code=str(e.code)) from e
    except Exception as e:
        raise TransportError(f"Gemini API call failed: {e}") from e

    text = response.text or ""
    if not text:
        raise TransportError("Gemini returned an empty response")
    log.info("Gemini response  len=%d", len(text))
    return text


# ── OpenAI-compatible (OpenAI, DeepSeek, Ollama, etc.) ──────────────────

def _openai_client(api_key: str) -> AsyncOpenAI:
    provider = _provider()
    base_url = _base_url() or None

    if provider == "ollama":
        base_url = base_url or "http://localhost:11434/v1"
        api_key = api_key or "ollama"
    elif provider == "deepseek":
        base_url = base_url or "https://api.deepseek.com/v1"

    return AsyncOpenAI(api_key=api_key, base_url=base_url)


async def _chat_openai(api_key: str, system_prompt: str, user_prompt: str) -> str:
    client = _openai_client(api_key)
    model = _model()

    log.info("OpenAI call  model=%s  sys_len=%d  user_len=%d",
             model, len(system_prompt), len(user_prompt))

    try:
        resp = await client.chat.completions.create(
            model=model,
            temperature=_temperature(),
            max_tokens=settings.llm_max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
    except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
        raise AuthError(f"{_provider()} API key was rejected", code=str(e.status_code)) from e
    except openai.OpenAIError as e:
        raise TransportError(f"{_provider()} API call failed: {e}") from e

    text = resp.choices[0].message.content if resp.choices else ""
    if not text:
        raise TransportError(f"No content in {_provider()} response")
    log.info("OpenAI response  len=%d  tokens_used=%s", len(text),
             resp.usage.total_tokens if resp.usage else "?")
    return text


# ── Public API ──────────────────────────────────────────────────────────

class Translator:
    """``ask(instruction, text) -> text`` over the configured provider.

    The API key comes from configuration, else from the kv store cache, else
    from ``secret_prompt``; a prompted key is cached. A rejected key is
    removed from the cache so the next call prompts again.
    """

    def __init__(self, kv: KeyValueStore, secret_prompt: Optional[Callable[[], Optional[str]]] = None):
        self.kv = kv
        self.secret_prompt = secret_prompt

    def _api_key(self) -> str:
        if _provider() == "ollama":
            return ""
        if settings.llm_api_key:
            return settings.llm_api_key
        key = self.kv.get(settings.credential_key)
        if key:
            return key
        if self.secret_prompt is not None:
            key = (self.secret_prompt() or "").strip()
            if key:
                self.kv.set(settings.credential_key, key)
                return key
        raise AuthError("No API key configured")

    async def ask(self, instruction: str, text: str) -> str:
        api_key = self._api_key()
        try:
            if _provider() == "gemini":
                return await _chat_gemini(api_key, instruction, text)
            return await _chat_openai(api_key, instruction, text)
        except AuthError:
            log.warning("API key rejected by %s; clearing cached credential", _provider())
            self.kv.delete(settings.credential_key)
            raise


def store_api_key(api_key: str) -> None:
    get_store().set(settings.credential_key, api_key)


def cached_api_key() -> str:
    return settings.llm_api_key or get_store().get(settings.credential_key) or ""


def get_translator() -> Translator:
    return Translator(get_store())
