"""
FastAPI server for the MindEase companion.

This module exposes the conversation session to the UI layer: reading the
conversation, mood history, suggested articles and panels, submitting text,
changing preferences and resetting the session. Mood points and escalation
advisories are also streamed as Server-Sent Events.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from . import __version__
from .config import Settings, configure_logging, get_settings
from .models import (
    Advisory,
    Article,
    Message,
    MoodPoint,
    Panel,
    Preferences,
    TurnResult,
    TurnStatus,
)
from .orchestrator import ConversationOrchestrator
from .services import build_generator, build_translator
from .storage import FileKeyValueStore, PersistenceAdapter
from .store import AdvisoryFeed, Feed

logger = logging.getLogger(__name__)


# API Request/Response Schemas
class SubmitRequest(BaseModel):
    """Payload for message submissions."""

    text: str = Field(..., description="The user's message")


class MessagesResponse(BaseModel):
    messages: list[Message]


class MoodResponse(BaseModel):
    points: list[MoodPoint]


class ArticlesResponse(BaseModel):
    articles: list[Article]


class PanelResponse(BaseModel):
    """The active panel and the items it shows."""

    panel: Panel
    items: list[dict[str, Any]]


class PreferencesUpdate(BaseModel):
    """Partial preferences update; omitted fields are left unchanged."""

    language: str | None = None
    topic: str | None = None
    persistence_enabled: bool | None = None


class ResetRequest(BaseModel):
    confirm: bool = Field(False, description="Must be true to clear the conversation")


class AdvisoriesResponse(BaseModel):
    advisories: list[Advisory]


def _event_stream(feed: Feed[Any], replay: bool) -> StreamingResponse:
    """Wrap a feed subscription in a text/event-stream response."""

    async def event_generator() -> AsyncGenerator[str, None]:
        try:
            async with feed.stream(replay=replay) as items:
                async for item in items:
                    yield f"data: {item.model_dump_json()}\n\n"
        except asyncio.CancelledError:
            # Client disconnected
            pass
        except Exception as e:
            logger.exception("Event stream failed")
            error_data = json.dumps({"error": str(e)})
            yield f"event: error\ndata: {error_data}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


def create_app(
    orchestrator: ConversationOrchestrator, advisories: AdvisoryFeed
) -> FastAPI:
    """
    Create a FastAPI application around a conversation session.

    Args:
        orchestrator: The session to expose
        advisories: Feed the orchestrator publishes escalation advisories to

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Load persisted state on startup, release collaborators on shutdown."""
        orchestrator.load()
        yield
        await orchestrator.aclose()

    app = FastAPI(
        title="MindEase",
        description="Conversational mental wellness companion",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "mindease"}

    # MARK: - Conversation

    @app.get("/messages")
    async def get_messages() -> MessagesResponse:
        return MessagesResponse(messages=list(orchestrator.messages))

    @app.post("/messages")
    async def submit_message(request: SubmitRequest) -> TurnResult:
        """
        Submit user text and wait for the assistant's reply.

        Returns:
            The settled turn

        Raises:
            HTTPException: 409 while another turn is in flight, 422 on blank text
        """
        result = await orchestrator.submit(request.text)
        if result.status is TurnStatus.REJECTED:
            raise HTTPException(status_code=409, detail=result.notice)
        if result.status is TurnStatus.IGNORED:
            raise HTTPException(status_code=422, detail="Message text is empty")
        return result

    @app.post("/session/reset")
    async def reset_session(request: ResetRequest) -> MessagesResponse:
        """Clear the conversation back to the greeting. Requires confirmation."""
        if not request.confirm:
            raise HTTPException(status_code=400, detail="Reset must be confirmed")
        if not orchestrator.reset_session(confirm=True):
            raise HTTPException(
                status_code=409, detail="Cannot reset while a reply is pending"
            )
        return MessagesResponse(messages=list(orchestrator.messages))

    # MARK: - Mood

    @app.get("/mood")
    async def get_mood() -> MoodResponse:
        return MoodResponse(points=list(orchestrator.mood_points))

    @app.get("/mood/stream")
    async def stream_mood() -> StreamingResponse:
        """
        Stream mood points via Server-Sent Events.

        The recorded history is sent first, then each new point as it is
        recorded.
        """
        return _event_stream(orchestrator.mood_history, replay=True)

    # MARK: - Articles and panels

    @app.get("/articles")
    async def get_articles() -> ArticlesResponse:
        return ArticlesResponse(articles=list(orchestrator.suggested_articles))

    @app.get("/panel")
    async def get_panel() -> PanelResponse:
        return PanelResponse(
            panel=orchestrator.active_panel,
            items=[item.model_dump(mode="json") for item in orchestrator.panel_content()],
        )

    @app.post("/panel/{panel}")
    async def toggle_panel(panel: Panel) -> PanelResponse:
        """Open a panel (closing the others), or close it if already open."""
        orchestrator.toggle_panel(panel)
        return await get_panel()

    @app.delete("/panel")
    async def close_panel() -> PanelResponse:
        orchestrator.close_panel()
        return await get_panel()

    # MARK: - Preferences

    @app.get("/preferences")
    async def get_preferences() -> Preferences:
        return orchestrator.preferences

    @app.put("/preferences")
    async def update_preferences(update: PreferencesUpdate) -> Preferences:
        try:
            return orchestrator.update_preferences(
                language=update.language,
                topic=update.topic,
                persistence_enabled=update.persistence_enabled,
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    # MARK: - Advisories

    @app.get("/advisories")
    async def get_advisories() -> AdvisoriesResponse:
        return AdvisoriesResponse(advisories=list(advisories.all()))

    @app.get("/advisories/stream")
    async def stream_advisories() -> StreamingResponse:
        """Stream escalation advisories fired from now on."""
        return _event_stream(advisories, replay=False)

    return app


def build_app(settings: Settings) -> FastAPI:
    """Wire a session from settings and wrap it in an application."""
    advisories = AdvisoryFeed()
    orchestrator = ConversationOrchestrator(
        generator=build_generator(settings),
        translator=build_translator(settings),
        persistence=PersistenceAdapter(FileKeyValueStore(settings.storage_dir)),
        settings=settings,
        on_advisory=advisories.publish,
    )
    return create_app(orchestrator, advisories)


# Default app instance for uvicorn
app = build_app(get_settings())


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "mindease.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
