"""
Shared fakes for the MindEase test suite.
"""

import asyncio

from mindease.config import Settings
from mindease.models import GeneratedReply


class ScriptedGenerator:
    """Response generator returning a fixed reply, or failing on demand."""

    def __init__(
        self,
        text: str = "Thanks for sharing. I'm here for you.",
        emotion: str = "neutral",
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.text = text
        self.emotion = emotion
        self.error = error
        self.delay = delay
        self.gate = gate
        self.calls: list[str] = []
        self.closed = False

    async def generate(self, user_text: str) -> GeneratedReply:
        self.calls.append(user_text)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return GeneratedReply(text=self.text, emotion=self.emotion)

    async def aclose(self) -> None:
        self.closed = True


class ScriptedTranslator:
    """Translator that tags text with the target language."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if self.error is not None:
            raise self.error
        return f"[{target_language}] {text}"

    async def aclose(self) -> None:
        self.closed = True


class FailingStore:
    """Key/value store whose every operation fails like a full disk."""

    def get(self, key: str) -> str | None:
        raise OSError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def remove(self, key: str) -> None:
        raise OSError("disk unavailable")


def make_settings(**overrides) -> Settings:
    """Settings tuned for fast tests."""
    values = {"advisory_delay": 0.0, "request_timeout": 1.0}
    values.update(overrides)
    return Settings(**values)
