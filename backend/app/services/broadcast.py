"""
Live broadcast channel.

Fans out new readings, alerts and station updates to connected viewers.
Delivery is fire-and-forget: nothing is queued or replayed, a viewer that
connects late or drops mid-send simply misses the event.

Usage:
    registry = ConnectionRegistry()
    channel = BroadcastChannel(registry)
    channel.bind_loop(asyncio.get_running_loop())

    registry.connect(websocket)
    registry.subscribe(websocket, TOPIC_READINGS)

    channel.publish_reading(reading_out)   # safe from any thread
"""

import asyncio
import logging
import threading
from typing import Any, Optional, Protocol

from fastapi.encoders import jsonable_encoder

from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

TOPIC_READINGS = "readings"
TOPIC_ALERTS = "alerts"
TOPICS = (TOPIC_READINGS, TOPIC_ALERTS)

EVENT_NEW_READING = "new-reading"
EVENT_NEW_ALERT = "new-alert"
EVENT_STATION_UPDATE = "station-update"


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class ConnectionRegistry:
    """Live connections and their topic subscriptions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: set[Connection] = set()
        self._topics: dict[str, set[Connection]] = {topic: set() for topic in TOPICS}

    def connect(self, connection: Connection) -> None:
        with self._lock:
            self._connections.add(connection)
        logger.info("Viewer connected (%d online)", len(self))

    def disconnect(self, connection: Connection) -> None:
        with self._lock:
            self._connections.discard(connection)
            for members in self._topics.values():
                members.discard(connection)
        logger.info("Viewer disconnected (%d online)", len(self))

    def subscribe(self, connection: Connection, topic: str) -> None:
        if topic not in self._topics:
            raise ValidationError(f"Unknown topic: {topic}")
        with self._lock:
            if connection not in self._connections:
                self._connections.add(connection)
            self._topics[topic].add(connection)
        logger.info("Viewer subscribed to %s", topic)

    def subscribers(self, topic: str) -> list[Connection]:
        with self._lock:
            return list(self._topics.get(topic, ()))

    def connections(self) -> list[Connection]:
        with self._lock:
            return list(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    async def close_all(self) -> None:
        for connection in self.connections():
            try:
                await connection.close()
            except Exception as exc:
                logger.debug("Ignoring error while closing connection: %s", exc)
            self.disconnect(connection)


class BroadcastChannel:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def publish_reading(self, reading: Any) -> None:
        self._publish(EVENT_NEW_READING, reading, self.registry.subscribers(TOPIC_READINGS))

    def publish_alert(self, alert: Any) -> None:
        self._publish(EVENT_NEW_ALERT, alert, self.registry.subscribers(TOPIC_ALERTS))

    def publish_station_update(self, station: Any) -> None:
        self._publish(EVENT_STATION_UPDATE, station, self.registry.connections())

    def _publish(self, event: str, payload: Any, targets: list[Connection]) -> None:
        if not targets:
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("Dropping %s event: no event loop bound", event)
            return

        message = {"event": event, "data": jsonable_encoder(payload, by_alias=True)}
        for connection in targets:
            try:
                asyncio.run_coroutine_threadsafe(self._deliver(connection, event, message), loop)
            except RuntimeError as exc:
                logger.warning("Could not schedule %s event: %s", event, exc)

    async def _deliver(self, connection: Connection, event: str, message: dict[str, Any]) -> None:
        try:
            await connection.send_json(message)
        except Exception as exc:
            logger.warning("Failed to deliver %s event, dropping viewer: %s", event, exc)
            self.registry.disconnect(connection)
