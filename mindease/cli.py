"""
Command-line client for the MindEase server.
"""

import asyncio
import contextlib
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse

from .models import Advisory, Message, MoodPoint, Panel, Sender, TurnResult

DEFAULT_BASE_URL = "http://localhost:8000"
ADVISORY_WAIT = 10.0

app = typer.Typer(help="MindEase command-line client")

BaseUrl = typer.Option(
    DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the MindEase server"
)


# MARK: - Commands


@app.command()
def chat(base_url: str = BaseUrl) -> None:
    """Chat interactively. Enter an empty line to quit."""

    async def _chat() -> None:
        advisories: asyncio.Queue[Advisory] = asyncio.Queue()
        async with (
            httpx.AsyncClient(base_url=base_url, timeout=60.0) as client,
            httpx.AsyncClient(base_url=base_url, timeout=None) as stream_client,
        ):
            watcher = asyncio.create_task(
                _watch_advisories(stream_client, advisories)
            )
            try:
                print("Type a message and press Enter. An empty line exits.")
                while True:
                    text = await asyncio.to_thread(
                        typer.prompt, "you", default="", show_default=False
                    )
                    if not text.strip():
                        return

                    turn = await _submit(client, text)
                    if turn is None or not turn.escalated:
                        continue

                    # Advisories are published after a delay
                    advisory = await _next_advisory(
                        advisories, turn.user_message.id, ADVISORY_WAIT
                    )
                    if advisory is not None:
                        print(_format_advisory(advisory))
            finally:
                watcher.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await watcher

    _run_with_error_handling(_chat(), base_url)


@app.command()
def say(
    text: str = typer.Argument(..., help="The message to send"),
    base_url: str = BaseUrl,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Send a single message and print the reply."""

    async def _say() -> None:
        async with httpx.AsyncClient(base_url=base_url, timeout=60.0) as client:
            await _submit(client, text, json_output=json_output)

    _run_with_error_handling(_say(), base_url)


@app.command()
def history(base_url: str = BaseUrl) -> None:
    """Print the conversation so far."""

    async def _history() -> None:
        async with httpx.AsyncClient(base_url=base_url) as client:
            response = await client.get("/messages")
            response.raise_for_status()
            for raw in response.json()["messages"]:
                print(_format_message(Message.model_validate(raw)))

    _run_with_error_handling(_history(), base_url)


@app.command()
def mood(
    base_url: str = BaseUrl,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Print the recorded mood history."""

    async def _mood() -> None:
        async with httpx.AsyncClient(base_url=base_url) as client:
            response = await client.get("/mood")
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            points = result["points"]
            if not points:
                print("No mood data yet")
            for raw in points:
                print(_format_mood_point(MoodPoint.model_validate(raw)))

    _run_with_error_handling(_mood(), base_url)


@app.command()
def stream(base_url: str = BaseUrl) -> None:
    """Stream mood points in real-time."""

    async def _stream() -> None:
        print(f"Streaming from {base_url}/mood/stream... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", f"{base_url}/mood/stream"
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_stream(), base_url)


@app.command()
def panel(
    name: Panel = typer.Argument(..., help="Panel to toggle"),
    base_url: str = BaseUrl,
) -> None:
    """Toggle a panel and print what it shows."""

    async def _panel() -> None:
        async with httpx.AsyncClient(base_url=base_url) as client:
            response = await client.post(f"/panel/{name.value}")
            response.raise_for_status()
            result = response.json()
            print(f"Active panel: {result['panel']}")
            for item in result["items"]:
                print("  " + " | ".join(str(v) for v in item.values()))

    _run_with_error_handling(_panel(), base_url)


@app.command()
def prefs(
    language: str | None = typer.Option(None, "--language", "-l"),
    topic: str | None = typer.Option(None, "--topic", "-t"),
    persist: bool | None = typer.Option(None, "--persist/--no-persist"),
    base_url: str = BaseUrl,
) -> None:
    """Show or change preferences."""

    async def _prefs() -> None:
        async with httpx.AsyncClient(base_url=base_url) as client:
            update = {
                key: value
                for key, value in (
                    ("language", language),
                    ("topic", topic),
                    ("persistence_enabled", persist),
                )
                if value is not None
            }
            if update:
                response = await client.put("/preferences", json=update)
            else:
                response = await client.get("/preferences")
            response.raise_for_status()
            print(json.dumps(response.json(), indent=2))

    _run_with_error_handling(_prefs(), base_url)


@app.command()
def reset(
    base_url: str = BaseUrl,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear the conversation. Mood history is kept."""
    if not yes:
        typer.confirm("This clears the whole conversation. Continue?", abort=True)

    async def _reset() -> None:
        async with httpx.AsyncClient(base_url=base_url) as client:
            response = await client.post("/session/reset", json={"confirm": True})
            response.raise_for_status()
            print("Conversation cleared")

    _run_with_error_handling(_reset(), base_url)


# MARK: - Private Helpers


async def _submit(
    client: httpx.AsyncClient, text: str, json_output: bool = False
) -> TurnResult | None:
    response = await client.post("/messages", json={"text": text})
    if response.status_code == 409:
        print(response.json()["detail"])
        return None
    response.raise_for_status()

    turn = TurnResult.model_validate(response.json())
    if json_output:
        print(json.dumps(response.json(), indent=2))
        return turn

    if turn.sentiment is not None:
        print(f"[{turn.sentiment.category.value}] {turn.suggestion}")
    if turn.reply is not None:
        print(_format_message(turn.reply))
    return turn


async def _watch_advisories(
    client: httpx.AsyncClient, queue: asyncio.Queue[Advisory]
) -> None:
    """Forward advisories from the server's stream into a queue."""
    async with aconnect_sse(client, "GET", "/advisories/stream") as event_source:
        async for sse in event_source.aiter_sse():
            if sse.event == "error":
                _handle_sse_event(sse)
                continue
            try:
                advisory = Advisory.model_validate_json(sse.data)
            except ValueError as e:
                print(f"Warning: Could not parse SSE data: {sse.data} - {e}")
                continue
            await queue.put(advisory)


async def _next_advisory(
    queue: asyncio.Queue[Advisory], message_id: int, timeout: float
) -> Advisory | None:
    """
    Wait for the advisory raised by a given user message.

    Advisories for other messages that arrive first are printed as they are
    taken from the queue.

    Returns:
        The advisory, or None if it did not arrive within the timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            return None
        try:
            advisory = await asyncio.wait_for(queue.get(), timeout=remaining)
        except TimeoutError:
            return None
        if advisory.message_id == message_id:
            return advisory
        print(_format_advisory(advisory))


def _format_advisory(advisory: Advisory) -> str:
    return f"! {advisory.message} (mindease panel {advisory.action.value})"


def _format_message(message: Message) -> str:
    timestamp = message.created_at.astimezone().strftime("%H:%M")
    speaker = "you" if message.sender is Sender.USER else "mindease"
    return f"{timestamp} {speaker} > {message.text}"


def _format_mood_point(point: MoodPoint) -> str:
    timestamp = point.recorded_at.astimezone().strftime("%Y-%m-%d %H:%M")
    return f"{timestamp} {point.polarity:+.2f} {point.category.value}: {point.source_text}"


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        point = MoodPoint.model_validate_json(sse.data)
        print(_format_mood_point(point))

    except ValueError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
