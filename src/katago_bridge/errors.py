import json
from typing import Optional, Dict, Any


class BridgeError(Exception):
    """Base error for the bridge with message, detail and extra context."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        **kwargs: Any
    ):
        self.message = message
        self.detail = detail
        self.extra = kwargs
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        error_dict = {
            "type": type(self).__name__,
            "message": self.message,
            "detail": self.detail,
        }
        # Add any extra attributes
        error_dict.update(self.extra)
        # Remove None values
        return {k: v for k, v in error_dict.items() if v is not None}

    def to_json(self) -> str:
        """Convert error to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"Error: {self.message}"]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.extra:
            parts.append(f"Extra: {self.extra}")
        return "\n".join(parts)

    def __repr__(self) -> str:
        """Detailed string representation of the error."""
        return (
            f"{type(self).__name__}(message='{self.message}', "
            f"detail='{self.detail}', extra={self.extra})"
        )


class FetchError(BridgeError):
    """An asset could not be fetched."""


class NetworkFetchError(FetchError):
    """Remote resource unavailable: connection failure, HTTP error or timeout."""

    def __init__(
        self,
        url: str,
        message: str = "Download failed",
        detail: Optional[str] = None,
        status: Optional[int] = None,
        **kwargs: Any
    ):
        super().__init__(message, detail, url=url, status=status, **kwargs)
        self.url = url
        self.status = status


class LocalIOFetchError(FetchError):
    """Disk, archive or permission failure while installing an asset."""

    def __init__(
        self,
        path: str,
        message: str = "Local I/O failed",
        detail: Optional[str] = None,
        **kwargs: Any
    ):
        super().__init__(message, detail, path=str(path), **kwargs)
        self.path = str(path)


class UnsupportedPlatformError(BridgeError):
    """No engine build is published for this operating system."""


class EngineLaunchError(BridgeError):
    """The engine process could not be started."""


class ConnectionEstablishError(BridgeError):
    """The outbound WebSocket connection could not be opened."""


class EngineOutputDecodeError(BridgeError):
    """The engine wrote bytes that are not valid UTF-8."""


class ConnectionReceiveError(BridgeError):
    """Receiving from the client connection failed."""


class ConnectionSendError(BridgeError):
    """Sending to the client connection failed."""


class EngineWriteError(BridgeError):
    """Writing to the engine stdin failed, usually because it exited."""


class StreamAlreadyTakenError(RuntimeError):
    """A process stream was extracted more than once."""
