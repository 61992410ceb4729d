import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


def household_channel(household_id: int) -> str:
    return f"household_{household_id}"


def user_channel(user_id: int) -> str:
    return f"user_{user_id}"


class ConnectionManager:
    """Tracks open WebSocket connections grouped by room"""

    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        # Strong references to in-flight broadcasts, the loop only keeps weak ones
        self.tasks: Set[asyncio.Task] = set()

    def bind_loop(self, loop: asyncio.AbstractEventLoop):
        """Remember the server loop so worker threads can schedule broadcasts"""
        self.loop = loop

    async def connect(self, websocket: WebSocket, channels: List[str]):
        await websocket.accept()
        for channel in channels:
            self.rooms[channel].add(websocket)
        logger.info(f"WebSocket joined rooms: {', '.join(channels)}")

    def disconnect(self, websocket: WebSocket):
        for channel in list(self.rooms):
            self.rooms[channel].discard(websocket)
            if not self.rooms[channel]:
                del self.rooms[channel]

    async def broadcast(self, channel: str, message: Dict[str, Any]):
        for websocket in list(self.rooms.get(channel, ())):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping dead socket in {channel}: {e}")
                self.disconnect(websocket)


manager = ConnectionManager()


class EventPublisher:
    """Interface for broadcasting committed domain changes"""

    def emit(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class NullEventPublisher(EventPublisher):
    def emit(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        return None


class SocketEventPublisher(EventPublisher):
    """Fire-and-forget publisher backed by the WebSocket rooms"""

    def __init__(self, connection_manager: ConnectionManager = None):
        self.manager = connection_manager or manager

    def emit(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        message = jsonable_encoder(
            {
                "event": event,
                "channel": channel,
                "data": payload,
                "timestamp": datetime.utcnow(),
            }
        )
        coroutine = self.manager.broadcast(channel, message)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(coroutine)
            self.manager.tasks.add(task)
            task.add_done_callback(self.manager.tasks.discard)
        elif self.manager.loop is not None:
            asyncio.run_coroutine_threadsafe(coroutine, self.manager.loop)
        else:
            coroutine.close()
            logger.debug(f"No event loop bound, skipped {event} on {channel}")


class RecordingEventPublisher(EventPublisher):
    """Keeps emitted events in memory, used by tests and scripts"""

    def __init__(self):
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def emit(self, channel: str, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((channel, event, payload))

    def names(self) -> List[str]:
        return [event for _, event, _ in self.events]

    def clear(self):
        self.events.clear()
