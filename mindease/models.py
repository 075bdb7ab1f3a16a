"""
Shared data models for the MindEase companion.

This module defines the core domain models used across multiple layers
of the application (business logic, persistence, API, CLI).
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SentimentCategory(str, Enum):
    """Five polarity buckets, ordered from most to least favorable."""

    VERY_POSITIVE = "Very Positive"
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"
    VERY_NEGATIVE = "Very Negative"


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Panel(str, Enum):
    """Auxiliary views overlaid on the conversation. Only one is open at a time."""

    NONE = "none"
    MOOD_CHART = "mood_chart"
    RESOURCES = "resources"
    EMERGENCY = "emergency"
    RELAXATION = "relaxation"
    ARTICLES = "articles"


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_CLASSIFICATION = "awaiting_classification"
    AWAITING_GENERATION = "awaiting_generation"
    AWAITING_TRANSLATION = "awaiting_translation"
    SETTLED = "settled"


class TurnStatus(str, Enum):
    SETTLED = "settled"
    REJECTED = "rejected"
    IGNORED = "ignored"


class Sentiment(BaseModel):
    """Classifier output."""

    model_config = ConfigDict(frozen=True)

    category: SentimentCategory
    polarity: float = Field(..., ge=-1.0, le=1.0)


class Message(BaseModel):
    """A single conversation entry. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Monotonically assigned, unique per session")
    text: str
    sender: Sender
    category: SentimentCategory | None = None
    polarity: float | None = Field(None, ge=-1.0, le=1.0)
    created_at: datetime
    language: str | None = None
    emotion: str | None = Field(
        None, description="Emotion tag reported by the response generator"
    )


class MoodPoint(BaseModel):
    """One sample of the mood time series, recorded per user message."""

    model_config = ConfigDict(frozen=True)

    source_text: str
    category: SentimentCategory
    polarity: float = Field(..., ge=-1.0, le=1.0)
    recorded_at: datetime


class Article(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    topics: tuple[str, ...]
    summary: str
    url: str


class EmergencyContact(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    number: str
    link: str


class RelaxationTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str


class OnlineResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    url: str


class Preferences(BaseModel):
    language: str = "en"
    topic: str = "general"
    persistence_enabled: bool = True


class GeneratedReply(BaseModel):
    """Payload returned by a response generator."""

    text: str
    emotion: str = "neutral"


class Advisory(BaseModel):
    """Escalation notice offered when a user message reads as distressed."""

    model_config = ConfigDict(frozen=True)

    message: str
    action: Panel = Panel.RESOURCES
    polarity: float
    message_id: int = Field(..., description="Id of the user message that triggered it")


class TurnResult(BaseModel):
    """Outcome of a single submission."""

    status: TurnStatus
    notice: str | None = None
    sentiment: Sentiment | None = None
    suggestion: str | None = None
    user_message: Message | None = None
    reply: Message | None = None
    escalated: bool = False
