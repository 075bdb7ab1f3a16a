"""
Tests for the CLI's advisory handling.

The chat command follows the server's advisory stream, so an escalation
advisory is shown right after the turn that raised it.
"""

import asyncio

import httpx

from mindease.cli import _format_advisory, _next_advisory, _watch_advisories
from mindease.models import Advisory


def advisory(message_id: int) -> Advisory:
    return Advisory(message="Need support?", polarity=-1.0, message_id=message_id)


def sse_client(*advisories: Advisory) -> httpx.AsyncClient:
    body = "".join(f"data: {a.model_dump_json()}\n\n" for a in advisories)
    body += "data: {not json\n\n"

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/advisories/stream"
        return httpx.Response(
            200, headers={"content-type": "text/event-stream"}, content=body.encode()
        )

    return httpx.AsyncClient(
        base_url="http://mindease.test", transport=httpx.MockTransport(handler)
    )


class TestAdvisoryWatcher:
    """Test suite for following the advisory stream."""

    async def test_stream_events_are_queued(self, capsys):
        queue: asyncio.Queue[Advisory] = asyncio.Queue()

        async with sse_client(advisory(2), advisory(4)) as client:
            await _watch_advisories(client, queue)

        assert queue.get_nowait().message_id == 2
        assert queue.get_nowait().message_id == 4
        assert queue.empty()
        assert "Could not parse SSE data" in capsys.readouterr().out


class TestNextAdvisory:
    """Test suite for waiting on a turn's advisory."""

    async def test_waits_for_delayed_advisory(self):
        queue: asyncio.Queue[Advisory] = asyncio.Queue()

        async def publish_later():
            await asyncio.sleep(0.05)
            await queue.put(advisory(7))

        publisher = asyncio.create_task(publish_later())
        result = await _next_advisory(queue, 7, timeout=2.0)
        await publisher

        assert result == advisory(7)

    async def test_other_advisories_are_printed_first(self, capsys):
        queue: asyncio.Queue[Advisory] = asyncio.Queue()
        await queue.put(advisory(3))
        await queue.put(advisory(5))

        result = await _next_advisory(queue, 5, timeout=1.0)

        assert result.message_id == 5
        assert capsys.readouterr().out.strip() == _format_advisory(advisory(3))

    async def test_times_out(self):
        queue: asyncio.Queue[Advisory] = asyncio.Queue()
        assert await _next_advisory(queue, 1, timeout=0.05) is None
