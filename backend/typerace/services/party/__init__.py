"""Party session engine: registries, lifecycle, ranking and round timers.

Nothing in here touches Flask request context; the socket handlers in
typerace.socketio_events translate transport events into SessionManager
calls.
"""

from .manager import SessionManager  # noqa: F401
