"""
Pluggable collaborators for reply generation and translation.

The orchestrator depends on the ResponseGenerator and Translator protocols,
not on concrete services. Each protocol has a local implementation that
works offline (and doubles as a test fake) and an HTTP-backed one. Which
pair is used is decided once, at startup, from Settings.
"""

import logging
from typing import Protocol

import httpx

from .config import Settings
from .models import GeneratedReply, SentimentCategory
from .sentiment import classify

logger = logging.getLogger(__name__)


class ResponseGenerator(Protocol):
    async def generate(self, user_text: str) -> GeneratedReply: ...

    async def aclose(self) -> None: ...


class Translator(Protocol):
    async def translate(self, text: str, target_language: str) -> str: ...

    async def aclose(self) -> None: ...


# MARK: - Local


ANXIETY_TERMS = ("anxious", "anxiety", "worry", "panic")
SADNESS_TERMS = ("sad", "depress", "down", "hopeless", "empty")

ANXIETY_REPLY = (
    "It sounds like you might be experiencing anxiety. Remember that anxiety "
    "is a normal emotion that everyone feels at times. Try taking some deep "
    "breaths - inhale for 4 counts, hold for 2, and exhale for 6. Would you "
    "like to try one of our guided breathing exercises?"
)

SADNESS_REPLY = (
    "I'm sorry to hear you're feeling down. Depression and sadness are common "
    "experiences, but you don't have to face them alone. Have you spoken to "
    "someone you trust about how you're feeling? Sometimes sharing our "
    "feelings can help lighten the load. Remember that professional help is "
    "also available if needed."
)

LISTENING_REPLY = (
    "I'm here to listen and support you. Would you like to talk more about "
    "how you're feeling?"
)


class LocalResponseGenerator:
    """Rule-based replies that need no network access."""

    async def generate(self, user_text: str) -> GeneratedReply:
        lowered = user_text.lower()
        if any(term in lowered for term in ANXIETY_TERMS):
            return GeneratedReply(text=ANXIETY_REPLY, emotion="anxious")
        if any(term in lowered for term in SADNESS_TERMS):
            return GeneratedReply(text=SADNESS_REPLY, emotion="sad")

        category = classify(user_text).category
        if category is SentimentCategory.VERY_NEGATIVE:
            emotion = "anxious"
        elif category is SentimentCategory.NEGATIVE:
            emotion = "sad"
        else:
            emotion = "neutral"
        return GeneratedReply(text=LISTENING_REPLY, emotion=emotion)

    async def aclose(self) -> None:
        pass


class IdentityTranslator:
    """Returns text unchanged, as an unsupported-language translator would."""

    async def translate(self, text: str, target_language: str) -> str:
        return text

    async def aclose(self) -> None:
        pass


# MARK: - HTTP


class HttpResponseGenerator:
    """
    Calls a remote generation endpoint.

    The endpoint accepts ``{"message": text}`` and answers with
    ``{"text": ..., "emotion": ...}``.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def generate(self, user_text: str) -> GeneratedReply:
        """
        Request a reply for the user's text.

        Raises:
            httpx.HTTPError: On connection failures and non-2xx responses
            pydantic.ValidationError: When the payload is not a reply
        """
        response = await self._client.post(
            self._url, json={"message": user_text}, headers=self._headers
        )
        response.raise_for_status()
        return GeneratedReply.model_validate(response.json())

    async def aclose(self) -> None:
        await self._client.aclose()


class HttpTranslator:
    """Calls a LibreTranslate-compatible ``/translate`` endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def translate(self, text: str, target_language: str) -> str:
        payload = {
            "q": text,
            "source": "auto",
            "target": target_language,
            "format": "text",
        }
        if self._api_key:
            payload["api_key"] = self._api_key

        response = await self._client.post(self._url, json=payload)
        response.raise_for_status()
        translated = response.json().get("translatedText")
        if not isinstance(translated, str):
            raise ValueError("translation response has no translatedText")
        return translated

    async def aclose(self) -> None:
        await self._client.aclose()


# MARK: - Selection


def build_generator(settings: Settings) -> ResponseGenerator:
    if settings.generator_backend == "http":
        logger.info("Using remote response generator at %s", settings.generator_url)
        return HttpResponseGenerator(
            settings.generator_url,
            api_key=settings.generator_api_key,
            timeout=settings.request_timeout,
        )
    return LocalResponseGenerator()


def build_translator(settings: Settings) -> Translator:
    if settings.translator_backend == "http":
        logger.info("Using remote translator at %s", settings.translator_url)
        return HttpTranslator(
            settings.translator_url,
            api_key=settings.translator_api_key,
            timeout=settings.request_timeout,
        )
    return IdentityTranslator()
