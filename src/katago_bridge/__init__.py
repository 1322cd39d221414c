"""
KataGo bridge

Provisions a KataGo analysis engine on first use and relays its stdin/stdout
to a remote client over a WebSocket.
"""

__version__ = "0.1.0"

from katago_bridge import settings

__all__ = ["settings", "__version__"]
