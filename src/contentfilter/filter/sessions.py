"""SessionStore: per-session message buffers.

Lifecycle of one buffer:
    tx-begin         -> reset(): fresh empty buffer (any old one dropped)
    data-line        -> append(): one message line plus "\\n"
    commit           -> get(): read, buffer stays in place
    link-disconnect  -> remove(): buffer gone

Caps are explicit and off by default:
    max_buffer_bytes -- appends that would grow a buffer past this are
                        dropped; the buffer keeps its prefix. A header
                        block longer than the cap loses its tail, and
                        a Subject in that tail is never scanned
    max_sessions     -- opening a new session at capacity evicts the
                        oldest open one

Single-threaded by construction: the dispatcher is the only caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from contentfilter.domain.types import SessionId

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _Buffer:
    data: bytearray = field(default_factory=bytearray)
    truncated: bool = False


class SessionStore:
    """Mapping of session id -> accumulated message bytes.

    Args:
        max_buffer_bytes: per-session byte cap, None for unbounded
        max_sessions: open-session cap, None for unbounded
    """

    def __init__(
        self,
        max_buffer_bytes: int | None = None,
        max_sessions: int | None = None,
    ) -> None:
        if max_buffer_bytes is not None and max_buffer_bytes < 1:
            raise ValueError("max_buffer_bytes must be positive")
        if max_sessions is not None and max_sessions < 1:
            raise ValueError("max_sessions must be positive")
        self._max_buffer_bytes = max_buffer_bytes
        self._max_sessions = max_sessions
        # dict keeps insertion order, i.e. tx-begin order
        self._buffers: dict[SessionId, _Buffer] = {}

    def __len__(self) -> int:
        return len(self._buffers)

    def __contains__(self, session: SessionId) -> bool:
        return session in self._buffers

    def reset(self, session: SessionId) -> None:
        """Start a fresh, empty buffer for ``session``."""
        existing = self._buffers.pop(session, None)
        if (
            existing is None
            and self._max_sessions is not None
            and len(self._buffers) >= self._max_sessions
        ):
            oldest = next(iter(self._buffers))
            del self._buffers[oldest]
            log.warning(
                "Session limit of %d reached, dropping oldest session %r",
                self._max_sessions, oldest,
            )
        self._buffers[session] = _Buffer()

    def append(self, session: SessionId, data: bytes) -> None:
        """Add ``data`` to the session's buffer. No-op if there is none."""
        buf = self._buffers.get(session)
        if buf is None:
            return
        if buf.truncated:
            return
        if (
            self._max_buffer_bytes is not None
            and len(buf.data) + len(data) > self._max_buffer_bytes
        ):
            buf.truncated = True
            log.warning(
                "Message for session %r exceeds %d bytes, ignoring the rest",
                session, self._max_buffer_bytes,
            )
            return
        buf.data += data

    def remove(self, session: SessionId) -> None:
        """Forget the session's buffer, if any."""
        self._buffers.pop(session, None)

    def get(self, session: SessionId) -> bytes | None:
        """Snapshot of the buffer, or None if the session has none."""
        buf = self._buffers.get(session)
        if buf is None:
            return None
        return bytes(buf.data)

    def is_truncated(self, session: SessionId) -> bool:
        """True once an append for ``session`` hit the byte cap."""
        buf = self._buffers.get(session)
        return buf is not None and buf.truncated
