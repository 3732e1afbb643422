"""OpenSMTPD filter protocol: line decoding and response encoding.

One event per line, fields separated by "|", line ends "\\n" with an
optional "\\r" before it:

    config|ready
    report|<ver>|<ts>|<subsystem>|<phase>|<session>[|...]
    filter|<ver>|<ts>|<subsystem>|<phase>|<session>|<token>[|<rest>...]

Responses written back:

    register|<report|filter>|smtp-in|<phase>   (one per event of interest)
    register|ready
    filter-dataline|<session>|<token>|<rest>
    filter-result|<session>|<token>|proceed
    filter-result|<session>|<token>|reject|550 Blacklisted keyphrase found

Everything stays bytes end to end. Session ids, tokens and message
lines are never decoded, so whatever the MTA sends is echoed back
exactly.
"""
from __future__ import annotations

from dataclasses import dataclass

from contentfilter.domain.decisions import Verdict
from contentfilter.domain.types import Field, SessionId, Token

SEPARATOR = b"|"
SENTINEL = b"."

# Events this filter subscribes to, in registration order.
REGISTRATIONS: tuple[bytes, ...] = (
    b"register|report|smtp-in|tx-begin",
    b"register|filter|smtp-in|data-line",
    b"register|filter|smtp-in|commit",
    b"register|report|smtp-in|link-disconnect",
    b"register|ready",
)

# Fields before the phase: verb, version, timestamp, subsystem.
_PHASE_INDEX = 4


def decode_line(raw: bytes) -> list[Field]:
    """Strip trailing CR/LF bytes and split on "|"."""
    return raw.rstrip(b"\r\n").split(SEPARATOR)


@dataclass(frozen=True, slots=True)
class ReportEvent:
    """A ``report|...`` line reduced to what the filter consults."""
    phase: bytes
    session: SessionId

    @classmethod
    def from_fields(cls, fields: list[Field]) -> ReportEvent | None:
        """Build from decoded fields, or None if the line is too short."""
        if len(fields) < _PHASE_INDEX + 2:
            return None
        return cls(phase=fields[_PHASE_INDEX], session=fields[_PHASE_INDEX + 1])


@dataclass(frozen=True, slots=True)
class FilterEvent:
    """A ``filter|...`` line: phase, session, token and trailing fields."""
    phase: bytes
    session: SessionId
    token: Token
    rest: tuple[Field, ...] = ()

    @classmethod
    def from_fields(cls, fields: list[Field]) -> FilterEvent | None:
        """Build from decoded fields, or None if the line is too short."""
        if len(fields) < _PHASE_INDEX + 3:
            return None
        return cls(
            phase=fields[_PHASE_INDEX],
            session=fields[_PHASE_INDEX + 1],
            token=fields[_PHASE_INDEX + 2],
            rest=tuple(fields[_PHASE_INDEX + 3:]),
        )

    @property
    def payload(self) -> bytes:
        """The trailing fields re-joined, i.e. the original message line."""
        return SEPARATOR.join(self.rest)

    @property
    def is_end_of_data(self) -> bool:
        """True for the lone "." line that ends the message."""
        return self.rest == (SENTINEL,)


def dataline_response(session: SessionId, token: Token, payload: bytes) -> bytes:
    """Echo a data line back so the MTA keeps streaming the message."""
    return SEPARATOR.join((b"filter-dataline", session, token, payload)) + b"\n"


def result_response(session: SessionId, token: Token, verdict: Verdict) -> bytes:
    """The commit answer for ``verdict``."""
    return SEPARATOR.join((b"filter-result", session, token, verdict.response)) + b"\n"


def registration_response() -> bytes:
    """All registration lines, terminated, in order."""
    return b"".join(line + b"\n" for line in REGISTRATIONS)
