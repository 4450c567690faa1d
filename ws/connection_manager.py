from fastapi import WebSocket
from typing import Dict, Any, Optional
import logging

from jsonsurf.accumulator import StreamingObjectAccumulator
from jsonsurf.errors import DecodeError
from jsonsurf.protocol import EventType, StreamEvent
from jsonsurf.settings import ExtractorSettings

logger = logging.getLogger(__name__)


class ConnectionManager:
    """每个 client 一个 WebSocket + 一个独立的 StreamingObjectAccumulator（一条逻辑流）"""

    def __init__(self, settings: Optional[ExtractorSettings] = None):
        self.settings = settings
        self.active_connections: Dict[str, WebSocket] = {}
        self.accumulators: Dict[str, StreamingObjectAccumulator] = {}

    async def connect(self, websocket: WebSocket, client_id: str):
        await websocket.accept()
        self.active_connections[client_id] = websocket
        self.accumulators[client_id] = StreamingObjectAccumulator(settings=self.settings, stream_id=client_id)

    def disconnect(self, client_id: str):
        if client_id in self.active_connections:
            del self.active_connections[client_id]
        accumulator = self.accumulators.pop(client_id, None)
        if accumulator is not None and accumulator.accumulated_json():
            logger.info("Dropped pending JSON for client %s (in_json=%s)", client_id, accumulator.is_in_json())

    async def send(self, message: Any, client_id: str):
        ws = self.active_connections.get(client_id)
        if ws:
            await ws.send_json(message)

    async def feed(self, client_id: str, chunk: str) -> Optional[Any]:
        accumulator = self.accumulators.get(client_id)
        if accumulator is None:
            return None
        value = accumulator.process_chunk(chunk)
        if value is not None:
            await self.send(StreamEvent(EventType.OBJECT, stream_id=client_id, data=value).to_dict(), client_id)
        return value

    async def finalize(self, client_id: str) -> Optional[Any]:
        accumulator = self.accumulators.get(client_id)
        if accumulator is None:
            return None
        for value in accumulator.drain():
            await self.send(StreamEvent(EventType.OBJECT, stream_id=client_id, data=value).to_dict(), client_id)
        try:
            value = accumulator.finalize()
        except DecodeError as e:
            logger.warning("Finalize failed for client %s: %s", client_id, e)
            accumulator.reset()
            await self.send(StreamEvent(EventType.ERROR, stream_id=client_id, error=str(e)).to_dict(), client_id)
            return None
        if value is not None:
            await self.send(StreamEvent(EventType.OBJECT, stream_id=client_id, data=value).to_dict(), client_id)
        return value

    async def reset(self, client_id: str):
        accumulator = self.accumulators.get(client_id)
        if accumulator is None:
            return
        accumulator.reset()
        await self.send(StreamEvent(EventType.RESET, stream_id=client_id).to_dict(), client_id)
