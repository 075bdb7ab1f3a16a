"""
Durable client-side storage for the MindEase companion.

Conversation state is kept in a plain key/value text store. The
PersistenceAdapter is the only code that touches the store: it serializes
messages, mood points and preferences as JSON under fixed keys, restores
typed timestamps on load and never lets a storage failure escape.

Key/value stores signal I/O failures by raising OSError.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import TypeAdapter

from .models import Message, MoodPoint, Preferences
from .sentiment import category_for

logger = logging.getLogger(__name__)

MESSAGES_KEY = "chatMessages"
MOOD_KEY = "moodData"
PREFERENCES_KEY = "chatPreferences"

_MESSAGE_LIST = TypeAdapter(list[Message])
_MOOD_LIST = TypeAdapter(list[MoodPoint])


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Volatile store, used for tests and when nothing should touch disk."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore:
    """Stores each key as a JSON text file inside a directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def migrate_mood_record(record: Any) -> Any:
    """
    Rewrite a mood record stored in the legacy client shape.

    Older clients stored ``{"message", "sentiment", "polarity", "timestamp"}``
    with the timestamp as ISO text or epoch seconds. The stored sentiment
    label is dropped; the category is derived from polarity when the record
    is validated. Records already in the current shape are returned untouched.
    """
    if not isinstance(record, dict) or "source_text" in record:
        return record

    migrated = dict(record)
    migrated.pop("sentiment", None)
    if "message" in migrated:
        migrated["source_text"] = migrated.pop("message")
    if "timestamp" in migrated:
        migrated["recorded_at"] = migrated.pop("timestamp")
    return migrated


class PersistenceAdapter:
    """
    Serializes conversation state to a key/value store.

    Whether anything should be persisted at all is decided by the caller;
    the adapter always does what it is asked and reports failures through
    logging and boolean results rather than exceptions.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # MARK: - Writes

    def save_messages(self, messages: Sequence[Message]) -> bool:
        """
        Persist the full message sequence.

        Returns:
            True when the write succeeded
        """
        return self._write(MESSAGES_KEY, _MESSAGE_LIST.dump_json(list(messages)))

    def save_mood_points(self, points: Sequence[MoodPoint]) -> bool:
        """
        Persist the full mood history.

        Returns:
            True when the write succeeded
        """
        return self._write(MOOD_KEY, _MOOD_LIST.dump_json(list(points)))

    def save_preferences(self, preferences: Preferences) -> bool:
        """Persist the topic and persistence flag. Language is per session."""
        payload = preferences.model_dump_json(exclude={"language"})
        return self._write(PREFERENCES_KEY, payload.encode())

    def clear_messages(self) -> bool:
        """Remove the persisted message sequence, leaving mood data in place."""
        try:
            self._store.remove(MESSAGES_KEY)
        except OSError:
            logger.exception("Failed to clear stored messages")
            return False
        return True

    # MARK: - Reads

    def load(self) -> tuple[list[Message], list[MoodPoint]]:
        """
        Restore messages and mood points.

        Each key is read independently: a corrupt or missing entry yields an
        empty list for that entry only.

        Returns:
            Tuple of (messages, mood points) with timestamps as datetimes
        """
        messages = self._read(MESSAGES_KEY, self._parse_messages) or []
        points = self._read(MOOD_KEY, self._parse_mood_points) or []
        logger.debug(
            "Loaded %d messages and %d mood points", len(messages), len(points)
        )
        return messages, points

    def load_preferences(self) -> Preferences:
        """Restore preferences, falling back to defaults."""
        preferences = self._read(PREFERENCES_KEY, Preferences.model_validate_json)
        return preferences or Preferences()

    # MARK: - Private Helpers

    @staticmethod
    def _parse_messages(raw: str) -> list[Message]:
        messages = _MESSAGE_LIST.validate_json(raw)
        return [
            message.model_copy(update={"category": category_for(message.polarity)})
            if message.polarity is not None
            else message
            for message in messages
        ]

    @staticmethod
    def _parse_mood_points(raw: str) -> list[MoodPoint]:
        records = json.loads(raw)
        if not isinstance(records, list):
            raise ValueError("mood data is not a list")

        points = []
        for index, record in enumerate(records):
            record = migrate_mood_record(record)
            if isinstance(record, dict) and isinstance(
                record.get("polarity"), (int, float)
            ):
                record["category"] = category_for(record["polarity"])
            try:
                points.append(MoodPoint.model_validate(record))
            except ValueError as e:
                logger.warning("Skipping unreadable mood record %d: %s", index, e)
        return points

    def _read(self, key: str, parse: Any) -> Any:
        try:
            raw = self._store.get(key)
        except OSError:
            logger.warning("Could not read stored %s", key, exc_info=True)
            return None

        if raw is None:
            return None

        try:
            return parse(raw)
        except ValueError as e:
            # Covers malformed JSON and pydantic validation errors alike
            logger.warning("Discarding unreadable stored %s: %s", key, e)
            return None

    def _write(self, key: str, payload: bytes) -> bool:
        try:
            self._store.set(key, payload.decode("utf-8"))
        except OSError:
            logger.exception("Failed to persist %s", key)
            return False
        return True
