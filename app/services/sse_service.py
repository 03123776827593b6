# ============================================
# app/services/sse_service.py - 실시간 이벤트(SSE) 연결 관리
# ============================================
# Server-Sent Events 연결을 사용자별로 관리하고,
# 특정 사용자의 모든 연결에 이벤트를 전송합니다.
# ============================================

import asyncio
import json
import logging
import threading
from typing import Any, AsyncGenerator, Dict, Optional, Set

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100
HEARTBEAT_COMMENT = ": heartbeat\n\n"


def format_sse(event_type: str, data: Any) -> str:
    """
    SSE 메시지 형식으로 변환합니다.

    [메시지 형식]
    event: notification
    data: {"id": "...", ...}
    (빈 줄)
    """
    payload = json.dumps(jsonable_encoder(data), ensure_ascii=False)
    return f"event: {event_type}\ndata: {payload}\n\n"


class SSEConnection:
    """
    SSE 연결 하나 (브라우저 탭 하나)

    연결마다 크기가 제한된 큐를 가지고, 연결을 만든 이벤트 루프에서만 큐를 다룹니다.
    """

    def __init__(self, user_id: str, loop: asyncio.AbstractEventLoop, maxsize: int):
        self.user_id = user_id
        self.loop = loop
        self.queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=maxsize)

    def __repr__(self):
        return f"<SSEConnection(user_id={self.user_id}, pending={self.queue.qsize()})>"


class SSEConnectionRegistry:
    """
    사용자별 SSE 연결 레지스트리

    [신입 개발자를 위한 팁]
    - 한 사용자가 여러 탭/기기에서 접속할 수 있어서 user_id → 연결 집합으로 관리합니다.
    - 라우터의 동기 함수는 스레드풀에서 실행되므로 broadcast()는 다른 스레드에서 불릴 수 있습니다.
      그래서 딕셔너리는 Lock으로 보호하고, 큐에 넣는 작업은
      loop.call_soon_threadsafe()로 연결의 이벤트 루프에 맡깁니다.
    - 연결이 끊긴 동안의 이벤트는 보관하지 않습니다 (재연결 시 목록 API로 다시 조회).
    """

    def __init__(self, event_type: str, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.event_type = event_type
        self.queue_size = queue_size
        self._lock = threading.Lock()
        self._connections: Dict[str, Set[SSEConnection]] = {}

    def add(self, user_id: str) -> SSEConnection:
        """현재 이벤트 루프에 묶인 새 연결을 등록합니다."""
        connection = SSEConnection(user_id, asyncio.get_running_loop(), self.queue_size)
        with self._lock:
            self._connections.setdefault(user_id, set()).add(connection)
        logger.info(f"[SSE:{self.event_type}] connected user_id={user_id} total={self.connection_count(user_id)}")
        return connection

    def remove(self, connection: SSEConnection) -> None:
        """연결을 해제합니다. 이미 해제된 연결이면 아무 일도 하지 않습니다."""
        with self._lock:
            connections = self._connections.get(connection.user_id)
            if not connections or connection not in connections:
                return
            connections.discard(connection)
            if not connections:
                del self._connections[connection.user_id]
        logger.info(f"[SSE:{self.event_type}] disconnected user_id={connection.user_id}")

    def connection_count(self, user_id: Optional[str] = None) -> int:
        """user_id의 연결 수 (None이면 전체 연결 수)"""
        with self._lock:
            if user_id is not None:
                return len(self._connections.get(user_id, ()))
            return sum(len(connections) for connections in self._connections.values())

    def broadcast(self, user_id: str, data: Any) -> int:
        """
        user_id의 모든 연결에 이벤트를 보냅니다.

        Args:
            user_id: 받을 사용자
            data: JSON으로 직렬화할 데이터

        Returns:
            int: 전송을 예약한 연결 수 (접속 중이 아니면 0)
        """
        with self._lock:
            connections = list(self._connections.get(user_id, ()))
        if not connections:
            return 0

        message = format_sse(self.event_type, data)
        scheduled = 0
        for connection in connections:
            try:
                connection.loop.call_soon_threadsafe(self._deliver, connection, message)
                scheduled += 1
            except RuntimeError:
                # 이벤트 루프가 이미 닫힌 연결
                logger.warning(f"[SSE:{self.event_type}] loop closed, dropping connection user_id={user_id}")
                self.remove(connection)
        return scheduled

    def _deliver(self, connection: SSEConnection, message: Optional[str]) -> None:
        try:
            connection.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                f"[SSE:{self.event_type}] queue full, event dropped user_id={connection.user_id}"
            )

    def close_all(self) -> None:
        """서버 종료 시 모든 스트림을 끝냅니다."""
        with self._lock:
            connections = [c for group in self._connections.values() for c in group]
            self._connections.clear()
        for connection in connections:
            try:
                connection.loop.call_soon_threadsafe(self._deliver, connection, None)
            except RuntimeError:
                pass
        logger.info(f"[SSE:{self.event_type}] closed {len(connections)} connections")

    async def event_stream(
        self,
        request: Any,
        connection: SSEConnection,
        heartbeat_seconds: float
    ) -> AsyncGenerator[str, None]:
        """
        StreamingResponse에 넘길 이벤트 스트림

        heartbeat_seconds 동안 이벤트가 없으면 주석 한 줄을 보내 연결을 유지합니다.
        클라이언트가 끊거나 close_all()이 호출되면 끝나며, 어떤 경우든 연결을 해제합니다.
        """
        try:
            yield ": connected\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(connection.queue.get(), timeout=heartbeat_seconds)
                except asyncio.TimeoutError:
                    yield HEARTBEAT_COMMENT
                    continue
                if message is None:
                    break
                yield message
        finally:
            self.remove(connection)


# 레지스트리 인스턴스 (애플리케이션 전체에서 하나씩만 사용)
notification_registry = SSEConnectionRegistry("notification")
message_registry = SSEConnectionRegistry("new-message")
