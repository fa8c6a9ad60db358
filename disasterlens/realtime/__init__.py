"""
Realtime event fan-out for DisasterLens.

Server side: broadcaster registry and per-subscriber SSE stream.
Client side: local state mirror, reconnect backoff and the stream client.
"""

from .sse import encode_event, make_event, SSEDecoder
from .broadcaster import Broadcaster, Subscriber
from .stream import event_stream
from .state import RealtimeState
from .backoff import ReconnectBackoff
from .client import RealtimeClient, ConnectionState

__all__ = [
    "encode_event", "make_event", "SSEDecoder",
    "Broadcaster", "Subscriber", "event_stream",
    "RealtimeState", "ReconnectBackoff", "RealtimeClient", "ConnectionState",
]
