from contextvars import ContextVar

# Per-request logging session, set by the server middleware
session_id: ContextVar[str | None] = ContextVar[str | None]("session_id", default=None)
