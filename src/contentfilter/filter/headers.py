"""Header extraction from an accumulated message buffer.

Only the header block is parsed; the body is never looked at. The
parser is the standard library's ``email`` package with the modern
policy, so RFC 2047 encoded-words in the Subject come back decoded.

A buffer is "unparsable" when it is empty or when no header field can
be read from its first line onward (for example a bare body with no
headers at all).

When the Subject header is repeated, the last occurrence is the one
reported, so a harmless first Subject cannot shadow a later one.
"""
from __future__ import annotations

from dataclasses import dataclass
from email import errors, policy
from email.parser import BytesHeaderParser


@dataclass(frozen=True, slots=True)
class MessageHeaders:
    """The parts of a parsed header block the filter consults."""
    subject: str | None = None


def _as_text(value: str) -> str:
    # Raw 8-bit header bytes arrive surrogate-escaped; read them as UTF-8.
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def extract_headers(raw: bytes) -> MessageHeaders | None:
    """Parse the header block of ``raw``.

    Returns None if the buffer holds no recognisable header.
    """
    if not raw.strip():
        return None

    msg = BytesHeaderParser(policy=policy.default).parsebytes(raw)
    if len(msg) == 0:
        return None

    # With repeated Subject headers the last one counts.
    try:
        subjects = msg.get_all("Subject")
    except (errors.HeaderParseError, ValueError):
        return None
    if not subjects:
        return MessageHeaders()
    return MessageHeaders(subject=_as_text(str(subjects[-1])))
