from fastapi import Request, WebSocket

from app.services.broadcast import BroadcastChannel, ConnectionRegistry
from app.services.ingest import ReadingIngest


def get_channel(request: Request) -> BroadcastChannel:
    return request.app.state.channel


def get_ingest(request: Request) -> ReadingIngest:
    return request.app.state.ingest


def get_registry(websocket: WebSocket) -> ConnectionRegistry:
    return websocket.app.state.registry
