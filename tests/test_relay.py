#!/usr/bin/env python3
"""
Tests for the staff message relay queue and its HTTP endpoint.
"""

import asyncio
import json
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from aiohttp import test_utils

from ctfbot.services.relay import RelayQueue, create_relay_app


def test_push_formats_game_chat_line():
    queue = RelayQueue()
    assert queue.push("Alice", "server restart in 5") == "<Alice@Discord> server restart in 5"
    assert len(queue) == 1


def test_drain_returns_and_clears():
    queue = RelayQueue()
    queue.push("Alice", "one")
    queue.push("Bob", "two")

    assert queue.drain() == ["<Alice@Discord> one", "<Bob@Discord> two"]
    assert len(queue) == 0
    assert queue.drain() == []


def test_push_after_drain_is_kept():
    queue = RelayQueue()
    queue.push("Alice", "one")
    drained = queue.drain()
    queue.push("Alice", "two")

    assert drained == ["<Alice@Discord> one"]
    assert queue.drain() == ["<Alice@Discord> two"]


def test_endpoint_returns_queue_as_json_and_clears_it():
    async def scenario():
        queue = RelayQueue()
        queue.push("Alice", "hello")
        queue.push("Bob", "world")

        async with test_utils.TestClient(test_utils.TestServer(create_relay_app(queue))) as client:
            first = await client.get("/")
            first_body = await first.text()
            second = await client.get("/anything")
            second_body = await second.text()
        return first, first_body, second, second_body, len(queue)

    first, first_body, second, second_body, remaining = asyncio.run(scenario())

    assert first.status == 200
    assert first.headers["Content-Type"].startswith("text/plain")
    assert json.loads(first_body) == ["<Alice@Discord> hello", "<Bob@Discord> world"]
    assert second.status == 200
    assert second_body == ""
    assert remaining == 0


def test_endpoint_ignores_other_verbs():
    async def scenario():
        queue = RelayQueue()
        queue.push("Alice", "hello")

        async with test_utils.TestClient(test_utils.TestServer(create_relay_app(queue))) as client:
            response = await client.post("/")
            body = await response.text()
        return response.status, body, len(queue)

    status, body, remaining = asyncio.run(scenario())

    assert status == 200
    assert body == ""
    assert remaining == 1


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
