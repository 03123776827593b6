"""
SSE 연결 레지스트리 테스트
"""

import asyncio
import json
import unittest

from app.services.sse_service import SSEConnectionRegistry, format_sse, HEARTBEAT_COMMENT


class FakeRequest:
    """StreamingResponse 대신 쓰는 가짜 요청 (is_disconnected만 흉내)"""

    def __init__(self):
        self.disconnected = False

    async def is_disconnected(self):
        return self.disconnected


class TestFormatSse(unittest.TestCase):

    def test_format(self):
        text = format_sse("notification", {"id": "n1", "message": "좋아요"})
        lines = text.split("\n")
        self.assertEqual(lines[0], "event: notification")
        self.assertTrue(lines[1].startswith("data: "))
        self.assertEqual(json.loads(lines[1][len("data: "):]), {"id": "n1", "message": "좋아요"})
        self.assertTrue(text.endswith("\n\n"))


class TestSSEConnectionRegistry(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.registry = SSEConnectionRegistry("notification", queue_size=2)

    async def test_broadcast_reaches_every_connection(self):
        first = self.registry.add("u1")
        second = self.registry.add("u1")
        self.registry.add("u2")
        self.assertEqual(self.registry.connection_count("u1"), 2)
        self.assertEqual(self.registry.connection_count(), 3)

        self.assertEqual(self.registry.broadcast("u1", {"n": 1}), 2)
        message = await asyncio.wait_for(first.queue.get(), timeout=1)
        self.assertTrue(message.startswith("event: notification\n"))
        self.assertEqual(await asyncio.wait_for(second.queue.get(), timeout=1), message)

    async def test_broadcast_without_connections(self):
        self.assertEqual(self.registry.broadcast("nobody", {"n": 1}), 0)

    async def test_remove(self):
        connection = self.registry.add("u1")
        self.registry.remove(connection)
        self.registry.remove(connection)
        self.assertEqual(self.registry.connection_count("u1"), 0)
        self.assertEqual(self.registry.broadcast("u1", {"n": 1}), 0)

    async def test_full_queue_drops_event(self):
        connection = self.registry.add("u1")
        for i in range(3):
            self.registry.broadcast("u1", {"n": i})
        await asyncio.sleep(0)
        self.assertEqual(connection.queue.qsize(), 2)

    async def test_close_all_ends_stream(self):
        connection = self.registry.add("u1")
        stream = self.registry.event_stream(FakeRequest(), connection, heartbeat_seconds=5)
        self.assertEqual(await stream.__anext__(), ": connected\n\n")

        self.registry.broadcast("u1", {"n": 1})
        message = await asyncio.wait_for(stream.__anext__(), timeout=1)
        self.assertIn('"n": 1', message)

        self.registry.close_all()
        with self.assertRaises(StopAsyncIteration):
            await asyncio.wait_for(stream.__anext__(), timeout=1)
        self.assertEqual(self.registry.connection_count(), 0)

    async def test_heartbeat_and_disconnect(self):
        request = FakeRequest()
        connection = self.registry.add("u1")
        stream = self.registry.event_stream(request, connection, heartbeat_seconds=0.01)
        await stream.__anext__()
        self.assertEqual(await asyncio.wait_for(stream.__anext__(), timeout=1), HEARTBEAT_COMMENT)

        request.disconnected = True
        with self.assertRaises(StopAsyncIteration):
            await asyncio.wait_for(stream.__anext__(), timeout=1)
        self.assertEqual(self.registry.connection_count("u1"), 0)


if __name__ == "__main__":
    unittest.main()
