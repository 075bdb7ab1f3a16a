"""
End-to-end tests for the MindEase API endpoints.

These tests verify the HTTP surface the UI layer uses: submitting messages,
reading mood history and articles, toggling panels, changing preferences and
resetting the session.
"""

import asyncio

import httpx
from fastapi.testclient import TestClient

from conftest import ScriptedGenerator, ScriptedTranslator, make_settings
from mindease.orchestrator import FALLBACK_REPLY, GREETING, ConversationOrchestrator
from mindease.server import create_app
from mindease.storage import MESSAGES_KEY, MemoryKeyValueStore, PersistenceAdapter
from mindease.store import AdvisoryFeed

# MARK: - Sync


class TestAPISync:
    """Integration tests covering the complete application flow using HTTP
    synchronous request/response flow."""

    def setup_method(self):
        """Set up a fresh app around a new session for each test."""
        self.store = MemoryKeyValueStore()
        self.generator = ScriptedGenerator()
        self.advisories = AdvisoryFeed()
        self.orchestrator = ConversationOrchestrator(
            generator=self.generator,
            translator=ScriptedTranslator(),
            persistence=PersistenceAdapter(self.store),
            settings=make_settings(),
            on_advisory=self.advisories.publish,
        )
        self.app = create_app(self.orchestrator, self.advisories)

    def test_complete_workflow(self):
        """Test the complete workflow: chat -> mood -> panels -> prefs -> reset."""
        with TestClient(self.app) as client:
            # 1. Health check and the initial greeting
            assert client.get("/").json()["status"] == "ok"
            messages = client.get("/messages").json()["messages"]
            assert [m["text"] for m in messages] == [GREETING]

            # 2. Submit a message
            response = client.post("/messages", json={"text": "I'm feeling great today"})
            assert response.status_code == 200

            turn = response.json()
            assert turn["status"] == "settled"
            assert turn["sentiment"]["category"] in ("Very Positive", "Positive")
            assert turn["reply"]["text"] == self.generator.text
            assert turn["escalated"] is False
            assert len(client.get("/messages").json()["messages"]) == 3

            # 3. The mood history has one point with the same timestamp
            points = client.get("/mood").json()["points"]
            assert len(points) == 1
            assert points[0]["recorded_at"] == turn["user_message"]["created_at"]

            # 4. Panels are mutually exclusive
            chart = client.post("/panel/mood_chart").json()
            assert chart["panel"] == "mood_chart"
            assert len(chart["items"]) == 1

            resources = client.post("/panel/resources").json()
            assert resources["panel"] == "resources"
            assert len(resources["items"]) == 3
            assert client.get("/panel").json()["panel"] == "resources"

            assert client.post("/panel/resources").json()["panel"] == "none"
            client.post("/panel/emergency")
            assert client.delete("/panel").json() == {"panel": "none", "items": []}

            # 5. Preferences steer recommendations
            prefs = client.put("/preferences", json={"topic": "sleep"}).json()
            assert prefs["topic"] == "sleep"
            titles = [a["title"] for a in client.get("/articles").json()["articles"]]
            assert titles == ["How to Improve Your Sleep Quality"]

            bad = client.put("/preferences", json={"language": "xx"})
            assert bad.status_code == 422

            # 6. Reset needs confirmation and keeps mood data
            assert client.post("/session/reset", json={}).status_code == 400

            reset = client.post("/session/reset", json={"confirm": True})
            assert reset.status_code == 200
            assert [m["text"] for m in reset.json()["messages"]] == [GREETING]
            assert self.store.get(MESSAGES_KEY) is None
            assert len(client.get("/mood").json()["points"]) == 1

    def test_blank_message_is_rejected(self):
        with TestClient(self.app) as client:
            response = client.post("/messages", json={"text": "   "})
            assert response.status_code == 422
            assert len(client.get("/messages").json()["messages"]) == 1

    def test_rejected_preferences_update_changes_nothing(self):
        """Test that one invalid field leaves every preference untouched."""
        with TestClient(self.app) as client:
            before = client.get("/preferences").json()

            response = client.put(
                "/preferences",
                json={"language": "te", "topic": "astrology", "persistence_enabled": False},
            )
            assert response.status_code == 422
            assert client.get("/preferences").json() == before

    def test_generation_failure_is_a_normal_reply(self):
        self.generator.error = httpx.ConnectError("offline")

        with TestClient(self.app) as client:
            response = client.post("/messages", json={"text": "hello"})
            assert response.status_code == 200
            assert response.json()["reply"]["text"] == FALLBACK_REPLY

    def test_escalation_is_reported(self):
        """Test that a distressed message schedules an advisory."""
        with TestClient(self.app) as client:
            response = client.post(
                "/messages", json={"text": "I feel hopeless and very anxious"}
            )
            assert response.status_code == 200
            assert response.json()["escalated"] is True

    def test_persisted_state_is_loaded_on_startup(self):
        """Test that the lifespan restores an earlier session."""
        with TestClient(self.app) as client:
            client.post("/messages", json={"text": "I am happy and grateful"})

        restored = ConversationOrchestrator(
            generator=ScriptedGenerator(),
            translator=ScriptedTranslator(),
            persistence=PersistenceAdapter(self.store),
            settings=make_settings(),
        )
        app = create_app(restored, AdvisoryFeed())
        with TestClient(app) as client:
            messages = client.get("/messages").json()["messages"]
            assert [m["text"] for m in messages][:2] == [
                GREETING,
                "I am happy and grateful",
            ]
            assert len(client.get("/mood").json()["points"]) == 1


# MARK: - Advisories


class TestAdvisories:
    """Tests for advisory delivery through the feed the API serves."""

    def setup_method(self):
        self.advisories = AdvisoryFeed()
        self.orchestrator = ConversationOrchestrator(
            generator=ScriptedGenerator(),
            translator=ScriptedTranslator(),
            persistence=PersistenceAdapter(MemoryKeyValueStore()),
            settings=make_settings(),
            on_advisory=self.advisories.publish,
        )

    async def test_advisory_reaches_stream_subscribers(self):
        received = []

        async def consume():
            async with self.advisories.stream(replay=False) as advisories:
                async for advisory in advisories:
                    received.append(advisory)
                    break

        consumer = asyncio.create_task(consume())
        await asyncio.sleep(0.01)

        result = await self.orchestrator.submit("I feel sad and anxious and worried")
        await self.orchestrator.drain_advisories()
        await asyncio.wait_for(consumer, timeout=2.0)

        assert len(received) == 1
        assert received[0].message_id == result.user_message.id
        assert self.advisories.all() == tuple(received)
