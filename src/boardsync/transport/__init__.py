"""Network transports for a TaskBoard."""

from boardsync.transport.websocket import WebSocketServer, decode_frame, encode_frame

__all__ = [
    "WebSocketServer",
    "decode_frame",
    "encode_frame",
]
