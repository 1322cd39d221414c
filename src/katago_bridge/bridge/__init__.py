from katago_bridge.bridge.connection import (
    WebSocketSink,
    WebSocketSource,
    connect,
    split,
)
from katago_bridge.bridge.messages import (
    CloseMessage,
    Message,
    OtherMessage,
    TextMessage,
)
from katago_bridge.bridge.session import BridgeSession, Direction

__all__ = [
    "BridgeSession",
    "CloseMessage",
    "Direction",
    "Message",
    "OtherMessage",
    "TextMessage",
    "WebSocketSink",
    "WebSocketSource",
    "connect",
    "split",
]
