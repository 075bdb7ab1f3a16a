"""
Conversation orchestration for the MindEase companion.

The ConversationOrchestrator owns the message sequence and session state. A
submission runs as one sequential turn:

    idle -> awaiting_classification -> awaiting_generation
         -> awaiting_translation (non-default language only) -> settled

Classification, coping suggestion, mood recording and persistence happen
synchronously on arrival; reply generation and translation are the only
suspension points. Failures of external collaborators are converted into
fallback values here and never propagate to callers.
"""

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone

from pydantic import BaseModel

from .catalog import (
    ARTICLES,
    EMERGENCY_CONTACTS,
    ONLINE_RESOURCES,
    RELAXATION_TRACKS,
    SUPPORTED_LANGUAGES,
    TOPICS,
)
from .config import Settings, get_settings
from .coping import suggest
from .models import (
    Advisory,
    Article,
    Message,
    MoodPoint,
    Panel,
    Preferences,
    Sender,
    TurnResult,
    TurnState,
    TurnStatus,
)
from .recommender import recommend
from .sentiment import classify
from .services import ResponseGenerator, Translator
from .storage import PersistenceAdapter
from .store import MoodHistory

logger = logging.getLogger(__name__)

GREETING = "Hello! I'm your mental wellness assistant. How can I help you today?"

FALLBACK_REPLY = (
    "I'm having trouble connecting right now. Please try again in a moment."
)

BUSY_NOTICE = "Please wait for the current reply before sending another message."

ADVISORY_MESSAGE = (
    "It seems you're going through a difficult time. Would you like to see "
    "some mental health resources?"
)

AdvisoryCallback = Callable[[Advisory], Awaitable[None]]

_IN_FLIGHT = frozenset(
    {
        TurnState.AWAITING_CLASSIFICATION,
        TurnState.AWAITING_GENERATION,
        TurnState.AWAITING_TRANSLATION,
    }
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _language_code(language: str) -> str:
    code = language.strip().lower()
    if code not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language!r}")
    return code


def _topic_name(topic: str) -> str:
    name = topic.strip().lower()
    if name not in TOPICS:
        raise ValueError(f"Unknown topic: {topic!r}")
    return name


class ConversationOrchestrator:
    """
    Hub of a single conversation session.

    Args:
        generator: Produces assistant replies
        translator: Translates replies into the selected language
        persistence: Durable storage for messages, mood points and preferences
        settings: Runtime settings, defaults to the cached application settings
        catalog: Articles available for recommendation
        on_advisory: Awaited with each escalation advisory, after a delay
    """

    def __init__(
        self,
        generator: ResponseGenerator,
        translator: Translator,
        persistence: PersistenceAdapter,
        settings: Settings | None = None,
        catalog: Iterable[Article] = ARTICLES,
        on_advisory: AdvisoryCallback | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._generator = generator
        self._translator = translator
        self._persistence = persistence
        self._catalog = tuple(catalog)
        self._on_advisory = on_advisory

        self._preferences = Preferences(
            language=self._settings.default_language,
            topic=self._settings.default_topic,
        )
        self._ids = itertools.count(1)
        self._messages: list[Message] = [self._greeting()]
        self._mood = MoodHistory()
        self._panel = Panel.NONE
        self._turn_state = TurnState.IDLE
        self._last_user_text = ""
        self._suggested: list[Article] = []
        self._advisory_tasks: set[asyncio.Task[None]] = set()
        self._refresh_articles()

    # MARK: - Read access

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def mood_points(self) -> tuple[MoodPoint, ...]:
        return self._mood.all()

    @property
    def mood_history(self) -> MoodHistory:
        return self._mood

    @property
    def active_panel(self) -> Panel:
        return self._panel

    @property
    def suggested_articles(self) -> tuple[Article, ...]:
        return tuple(self._suggested)

    @property
    def preferences(self) -> Preferences:
        return self._preferences.model_copy()

    @property
    def turn_state(self) -> TurnState:
        return self._turn_state

    @property
    def busy(self) -> bool:
        """True while a turn is in flight and new submissions are rejected."""
        return self._turn_state in _IN_FLIGHT

    def panel_content(self) -> list[BaseModel]:
        """Return the items shown by the active panel."""
        if self._panel is Panel.MOOD_CHART:
            return list(self._mood.all())
        if self._panel is Panel.RESOURCES:
            return list(ONLINE_RESOURCES)
        if self._panel is Panel.EMERGENCY:
            return list(EMERGENCY_CONTACTS)
        if self._panel is Panel.RELAXATION:
            return list(RELAXATION_TRACKS)
        if self._panel is Panel.ARTICLES:
            return list(self._suggested)
        return []

    # MARK: - Lifecycle

    def load(self) -> None:
        """
        Restore preferences and, if persistence is enabled, the stored
        conversation and mood history. Call once at startup.
        """
        stored = self._persistence.load_preferences()
        self._preferences = self._preferences.model_copy(
            update={
                "topic": stored.topic,
                "persistence_enabled": stored.persistence_enabled,
            }
        )

        if stored.persistence_enabled:
            messages, points = self._persistence.load()
            if messages:
                self._messages = messages
                self._ids = itertools.count(max(m.id for m in messages) + 1)
            self._mood = MoodHistory(points)
            logger.info(
                "Restored %d messages and %d mood points", len(messages), len(points)
            )

        self._refresh_articles()

    async def drain_advisories(self) -> None:
        """Wait until every scheduled advisory has been delivered."""
        if self._advisory_tasks:
            await asyncio.gather(*self._advisory_tasks)

    async def aclose(self) -> None:
        """Cancel pending advisories and release collaborators."""
        tasks = list(self._advisory_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        await self._generator.aclose()
        await self._translator.aclose()

    # MARK: - Turns

    async def submit(self, text: str) -> TurnResult:
        """
        Process one user submission through to the assistant's reply.

        Args:
            text: Raw user input

        Returns:
            The turn outcome. Submissions made while another turn is in flight
            are rejected, blank submissions are ignored.
        """
        if self.busy:
            logger.info("Rejected submission while a turn is in flight")
            return TurnResult(status=TurnStatus.REJECTED, notice=BUSY_NOTICE)

        text = text.strip()
        if not text:
            return TurnResult(status=TurnStatus.IGNORED)

        self._turn_state = TurnState.AWAITING_CLASSIFICATION
        language = self._preferences.language
        try:
            sentiment = classify(text)
            suggestion = suggest(sentiment.category)

            created_at = _utcnow()
            user_message = self._append(
                text=text,
                sender=Sender.USER,
                category=sentiment.category,
                polarity=sentiment.polarity,
                created_at=created_at,
                language=language,
            )
            await self._mood.record(
                MoodPoint(
                    source_text=text,
                    category=sentiment.category,
                    polarity=sentiment.polarity,
                    recorded_at=created_at,
                )
            )
            self._persist_messages()
            self._persist_mood()

            self._last_user_text = text
            self._refresh_articles()

            self._turn_state = TurnState.AWAITING_GENERATION
            reply_text, emotion, reply_language = await self._reply_for(text, language)

            reply = self._append(
                text=reply_text,
                sender=Sender.ASSISTANT,
                created_at=_utcnow(),
                language=reply_language,
                emotion=emotion,
            )
            self._persist_messages()

            escalated = sentiment.polarity < self._settings.escalation_threshold
            if escalated:
                self._schedule_advisory(
                    Advisory(
                        message=ADVISORY_MESSAGE,
                        polarity=sentiment.polarity,
                        message_id=user_message.id,
                    )
                )
        finally:
            self._turn_state = TurnState.SETTLED

        return TurnResult(
            status=TurnStatus.SETTLED,
            sentiment=sentiment,
            suggestion=suggestion,
            user_message=user_message,
            reply=reply,
            escalated=escalated,
        )

    # MARK: - Panels

    def toggle_panel(self, panel: Panel) -> Panel:
        """
        Open a panel, closing any other, or close it if it is already open.

        Returns:
            The panel that is active afterwards
        """
        self._panel = Panel.NONE if self._panel is panel else panel
        return self._panel

    def close_panel(self) -> None:
        self._panel = Panel.NONE

    def show_mood_chart(self) -> Panel:
        return self.toggle_panel(Panel.MOOD_CHART)

    def show_resources(self) -> Panel:
        return self.toggle_panel(Panel.RESOURCES)

    def show_emergency_support(self) -> Panel:
        return self.toggle_panel(Panel.EMERGENCY)

    def show_relaxation(self) -> Panel:
        return self.toggle_panel(Panel.RELAXATION)

    def show_articles(self) -> Panel:
        return self.toggle_panel(Panel.ARTICLES)

    # MARK: - Preferences

    def set_language(self, language: str) -> None:
        """
        Select the language replies are translated into.

        Raises:
            ValueError: If the language is not supported
        """
        self._preferences.language = _language_code(language)

    def set_topic(self, topic: str) -> None:
        """
        Select the topic used to widen article recommendations.

        Raises:
            ValueError: If the topic is unknown
        """
        self._preferences.topic = _topic_name(topic)
        self._persistence.save_preferences(self._preferences)
        self._refresh_articles()

    def update_preferences(
        self,
        language: str | None = None,
        topic: str | None = None,
        persistence_enabled: bool | None = None,
    ) -> Preferences:
        """
        Apply several preference changes at once. Omitted values are kept.

        Every value is validated before any is applied, so a rejected update
        leaves the preferences unchanged.

        Raises:
            ValueError: If the language or topic is not recognized
        """
        code = _language_code(language) if language is not None else None
        name = _topic_name(topic) if topic is not None else None

        if code is not None:
            self._preferences.language = code
        if name is not None:
            self.set_topic(name)
        if persistence_enabled is not None:
            self.set_persistence_enabled(persistence_enabled)
        return self.preferences

    def set_persistence_enabled(self, enabled: bool) -> None:
        """Turn durable storage on or off. Enabling it saves current state."""
        self._preferences.persistence_enabled = enabled
        self._persistence.save_preferences(self._preferences)
        self._persist_messages()
        self._persist_mood()

    def reset_session(self, confirm: bool = False) -> bool:
        """
        Clear the conversation back to the greeting. Mood history is kept.

        Args:
            confirm: Must be True; the reset is destructive

        Returns:
            True when the conversation was cleared
        """
        if not confirm:
            return False
        if self.busy:
            logger.info("Refused to reset while a turn is in flight")
            return False

        self._messages = [self._greeting()]
        self._last_user_text = ""
        self._refresh_articles()
        self._persistence.clear_messages()
        logger.info("Conversation reset")
        return True

    # MARK: - Private Helpers

    def _greeting(self) -> Message:
        return Message(
            id=next(self._ids),
            text=GREETING,
            sender=Sender.ASSISTANT,
            created_at=_utcnow(),
            language=self._settings.default_language,
        )

    def _append(self, **fields) -> Message:
        message = Message(id=next(self._ids), **fields)
        self._messages.append(message)
        return message

    def _refresh_articles(self) -> None:
        self._suggested = recommend(
            self._last_user_text, self._preferences.topic, self._catalog
        )

    def _persist_messages(self) -> None:
        if self._preferences.persistence_enabled:
            self._persistence.save_messages(self._messages)

    def _persist_mood(self) -> None:
        if self._preferences.persistence_enabled:
            self._persistence.save_mood_points(self._mood.all())

    async def _reply_for(
        self, text: str, language: str
    ) -> tuple[str, str | None, str]:
        """Return (text, emotion, language) for the assistant's reply."""
        default_language = self._settings.default_language
        timeout = self._settings.request_timeout

        try:
            generated = await asyncio.wait_for(
                self._generator.generate(text), timeout=timeout
            )
        except Exception:
            logger.warning("Reply generation failed, using fallback", exc_info=True)
            return FALLBACK_REPLY, None, default_language

        if language == default_language:
            return generated.text, generated.emotion, language

        self._turn_state = TurnState.AWAITING_TRANSLATION
        try:
            translated = await asyncio.wait_for(
                self._translator.translate(generated.text, language), timeout=timeout
            )
        except Exception:
            logger.warning(
                "Translation to %s failed, keeping original text",
                language,
                exc_info=True,
            )
            return generated.text, generated.emotion, default_language

        return translated, generated.emotion, language

    def _schedule_advisory(self, advisory: Advisory) -> None:
        if self._on_advisory is None:
            return
        task = asyncio.create_task(self._deliver_advisory(advisory))
        self._advisory_tasks.add(task)
        task.add_done_callback(self._advisory_tasks.discard)

    async def _deliver_advisory(self, advisory: Advisory) -> None:
        await asyncio.sleep(self._settings.advisory_delay)
        try:
            await self._on_advisory(advisory)
        except Exception:
            logger.exception("Advisory delivery failed")
