"""ProtocolDispatcher: the filter's main loop.

Architecture:
    One thread, blocking I/O, one line at a time.
    Per-line flow: read -> decode -> mutate sessions or scan -> respond

Events handled:
    config|ready                 -> register for four events, then ready
    report ... tx-begin          -> SessionStore.reset(session)
    report ... link-disconnect   -> SessionStore.remove(session)
    filter ... data-line         -> echo the line, then buffer it
    filter ... commit            -> parse headers, scan Subject, answer

Anything else is ignored so newer MTA versions can add verbs and
phases without breaking the filter.

Policy on the commit path:
    - no buffer for the session    -> proceed
    - buffer has no parsable header -> logged, proceed (fail-open)
    - otherwise the Subject scan decides

The loop ends on EOF. Read and write errors are not caught here.
"""
from __future__ import annotations

import logging
from typing import BinaryIO

from contentfilter.domain.decisions import Verdict
from contentfilter.domain.matchers import Blacklist
from contentfilter.filter.headers import extract_headers
from contentfilter.filter.protocol import (
    FilterEvent,
    ReportEvent,
    dataline_response,
    decode_line,
    registration_response,
    result_response,
)
from contentfilter.filter.scanner import ContentScanner
from contentfilter.filter.sessions import SessionStore

log = logging.getLogger(__name__)


class ProtocolDispatcher:
    """Drives one OpenSMTPD filter conversation over a pair of streams.

    Args:
        blacklist: immutable matchers applied at commit time
        stdin: binary stream the MTA writes events to
        stdout: binary stream for protocol responses
        sessions: buffer store, a fresh unbounded one by default
    """

    def __init__(
        self,
        blacklist: Blacklist,
        stdin: BinaryIO,
        stdout: BinaryIO,
        sessions: SessionStore | None = None,
    ) -> None:
        self._scanner = ContentScanner(blacklist)
        self._stdin = stdin
        self._stdout = stdout
        self._sessions = sessions if sessions is not None else SessionStore()
        self._lines_processed = 0

    @property
    def sessions(self) -> SessionStore:
        """Access the session store (for test assertions)."""
        return self._sessions

    @property
    def lines_processed(self) -> int:
        return self._lines_processed

    def run(self) -> None:
        """Process lines until EOF."""
        while True:
            raw = self._stdin.readline()
            if not raw:
                log.debug("End of input after %d lines", self._lines_processed)
                return
            self.handle_line(raw)
            self._stdout.flush()

    def handle_line(self, raw: bytes) -> None:
        """Decode one protocol line and react to it."""
        self._lines_processed += 1
        fields = decode_line(raw)
        verb = fields[0]

        if verb == b"config":
            self._on_config(fields)
        elif verb == b"report":
            event = ReportEvent.from_fields(fields)
            if event is not None:
                self._on_report(event)
        elif verb == b"filter":
            event = FilterEvent.from_fields(fields)
            if event is not None:
                self._on_filter(event)
        else:
            log.debug("Ignoring unknown verb %r", verb)

    def _on_config(self, fields: list[bytes]) -> None:
        if len(fields) > 1 and fields[1] == b"ready":
            self._stdout.write(registration_response())
        else:
            log.debug("Ignoring config line %r", b"|".join(fields))

    def _on_report(self, event: ReportEvent) -> None:
        if event.phase == b"tx-begin":
            self._sessions.reset(event.session)
        elif event.phase == b"link-disconnect":
            self._sessions.remove(event.session)

    def _on_filter(self, event: FilterEvent) -> None:
        if event.phase == b"data-line":
            self._on_data_line(event)
        elif event.phase == b"commit":
            self._on_commit(event)

    def _on_data_line(self, event: FilterEvent) -> None:
        # The MTA stalls until every line is echoed, buffered or not.
        payload = event.payload
        self._stdout.write(dataline_response(event.session, event.token, payload))
        if event.is_end_of_data:
            return
        self._sessions.append(event.session, payload + b"\n")

    def _on_commit(self, event: FilterEvent) -> None:
        verdict = self._decide(event)
        if verdict.is_permitted():
            log.info("Allowing")
        else:
            log.info("Denying")
        self._stdout.write(result_response(event.session, event.token, verdict))

    def _decide(self, event: FilterEvent) -> Verdict:
        mail = self._sessions.get(event.session)
        if mail is None:
            return Verdict.ALLOW

        headers = extract_headers(mail)
        if headers is None:
            log.error(
                "Malformed eMail:\n%s.",
                mail.decode("utf-8", "backslashreplace"),
            )
            return Verdict.ALLOW

        return self._scanner.scan(headers.subject, "subject").verdict
