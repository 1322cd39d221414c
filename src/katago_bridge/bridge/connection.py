"""
WebSocket connection to the client.

A connection is split exactly once into a send-only ``WebSocketSink`` and a
receive-only ``WebSocketSource``; each half is handed to one relay direction.
"""

import contextlib
from typing import AsyncIterator, Protocol, Tuple

import aiohttp

from katago_bridge.bridge.messages import (
    CloseMessage,
    Message,
    OtherMessage,
    TextMessage,
)
from katago_bridge.errors import (
    ConnectionEstablishError,
    ConnectionReceiveError,
    ConnectionSendError,
)
from katago_bridge.utils.loggers import get_logger

logger = get_logger(__name__)

_CLOSE_TYPES = (
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
)


class MessageSink(Protocol):
    async def send_text(self, text: str) -> None: ...


class MessageSource(Protocol):
    async def receive(self) -> Message: ...


class WebSocketSink:
    def __init__(self, ws: aiohttp.ClientWebSocketResponse):
        self._ws = ws

    async def send_text(self, text: str) -> None:
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError) as e:
            raise ConnectionSendError("Failed to send", detail=str(e)) from e


class WebSocketSource:
    def __init__(self, ws: aiohttp.ClientWebSocketResponse):
        self._ws = ws

    async def receive(self) -> Message:
        """
        Receive the next frame as a ``Message``.

        Raises:
            ConnectionReceiveError: transport error on the socket
        """
        try:
            msg = await self._ws.receive()
        except (aiohttp.ClientError, OSError) as e:
            raise ConnectionReceiveError("Failed to receive", detail=str(e)) from e

        if msg.type == aiohttp.WSMsgType.TEXT:
            return TextMessage(msg.data)
        if msg.type in _CLOSE_TYPES:
            return CloseMessage(code=self._ws.close_code, reason=getattr(msg, "extra", None))
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise ConnectionReceiveError(
                "Failed to receive", detail=str(self._ws.exception() or msg.data)
            )
        return OtherMessage(kind=msg.type.name, data=msg.data)


def split(ws: aiohttp.ClientWebSocketResponse) -> Tuple[WebSocketSink, WebSocketSource]:
    return WebSocketSink(ws), WebSocketSource(ws)


@contextlib.asynccontextmanager
async def connect(url: str) -> AsyncIterator[aiohttp.ClientWebSocketResponse]:
    """
    Open a WebSocket to ``url``; closed again when the context exits.

    Raises:
        ConnectionEstablishError: handshake or transport failure
    """
    async with aiohttp.ClientSession() as session:
        try:
            ws = await session.ws_connect(url, autoping=True)
        except aiohttp.WSServerHandshakeError as e:
            raise ConnectionEstablishError(
                f"can't connect to {url}", detail=f"handshake rejected: {e.status} {e.message}"
            ) from e
        except (aiohttp.ClientError, OSError) as e:
            raise ConnectionEstablishError(f"can't connect to {url}", detail=str(e)) from e

        logger.info(f"Connection with {url} established")
        try:
            yield ws
        finally:
            await ws.close()
