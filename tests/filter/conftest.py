"""Shared fixtures for filter tests.

Provides protocol-line builders and a helper that runs a
ProtocolDispatcher over in-memory byte streams.
"""
from __future__ import annotations

import io
from types import SimpleNamespace

import pytest

from contentfilter.domain.matchers import LiteralMatcher, RegexMatcher
from contentfilter.filter.dispatcher import ProtocolDispatcher
from contentfilter.filter.sessions import SessionStore

REJECT = b"reject|550 Blacklisted keyphrase found"


def tx_begin(session: str) -> str:
    return f"report|0.7|1576146008.006099|smtp-in|tx-begin|{session}\n"


def link_disconnect(session: str) -> str:
    return f"report|0.7|1576146008.006099|smtp-in|link-disconnect|{session}\n"


def data_line(session: str, token: str, line: str) -> str:
    return f"filter|0.7|1576146008.006099|smtp-in|data-line|{session}|{token}|{line}\n"


def commit(session: str, token: str) -> str:
    return f"filter|0.7|1576146008.006099|smtp-in|commit|{session}|{token}\n"


def mail_transaction(session: str, token: str, mail_lines: list[str]) -> str:
    """tx-begin, every mail line, the "." sentinel, then commit."""
    parts = [tx_begin(session)]
    parts += [data_line(session, token, line) for line in mail_lines]
    parts.append(data_line(session, token, "."))
    parts.append(commit(session, token))
    return "".join(parts)


@pytest.fixture()
def protocol():
    """Namespace of the line builders above, for use inside tests."""
    return SimpleNamespace(
        tx_begin=tx_begin,
        link_disconnect=link_disconnect,
        data_line=data_line,
        commit=commit,
        mail_transaction=mail_transaction,
        REJECT=REJECT,
    )


@pytest.fixture()
def badword_blacklist():
    return (LiteralMatcher("badword"),)


@pytest.fixture()
def spam_regex_blacklist():
    return (RegexMatcher.compile(r"sp[a@]m"),)


@pytest.fixture()
def run_dispatcher():
    """Factory: feed ``text`` to a dispatcher, return (stdout bytes, dispatcher)."""

    def _run(
        text: str | bytes,
        blacklist=(),
        sessions: SessionStore | None = None,
    ) -> tuple[bytes, ProtocolDispatcher]:
        data = text.encode("utf-8") if isinstance(text, str) else text
        stdout = io.BytesIO()
        dispatcher = ProtocolDispatcher(
            blacklist, io.BytesIO(data), stdout, sessions=sessions
        )
        dispatcher.run()
        return stdout.getvalue(), dispatcher

    return _run
