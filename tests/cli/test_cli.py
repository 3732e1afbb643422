"""End-to-end tests for the contentfilter command.

Covers: a full conversation through main(), startup configuration
errors (exit status 1, nothing on stdout), option validation, and the
real executable driven over pipes the way OpenSMTPD drives it.
"""
from __future__ import annotations

import importlib
import io
import os
import subprocess
import sys
from pathlib import Path

import pytest

from contentfilter.cli import main

SRC_DIR = Path(__file__).resolve().parents[2] / "src"

REGISTRATION = (
    b"register|report|smtp-in|tx-begin\n"
    b"register|filter|smtp-in|data-line\n"
    b"register|filter|smtp-in|commit\n"
    b"register|report|smtp-in|link-disconnect\n"
    b"register|ready\n"
)


def make_session_input(session: str, token: str, mail_lines: list[str]) -> bytes:
    """Protocol lines for config, one complete transaction and commit."""
    lines = ["config|ready", f"report|0.7|1000|smtp-in|tx-begin|{session}"]
    lines += [
        f"filter|0.7|1000|smtp-in|data-line|{session}|{token}|{line}"
        for line in mail_lines
    ]
    lines.append(f"filter|0.7|1000|smtp-in|data-line|{session}|{token}|.")
    lines.append(f"filter|0.7|1000|smtp-in|commit|{session}|{token}")
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture()
def stdio(monkeypatch):
    """Replace sys.stdin/sys.stdout with in-memory binary-backed streams."""

    def _install(data: bytes) -> io.BytesIO:
        out = io.BytesIO()
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
        monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(out))
        return out

    return _install


def _run_executable(args: list[str], data: bytes) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH")) if p
    )
    return subprocess.run(
        [sys.executable, "-m", "contentfilter", *args],
        input=data,
        capture_output=True,
        env=env,
        timeout=30,
    )


class TestMain:

    def test_conversation_with_empty_blacklist(self, stdio):
        out = stdio(make_session_input("s1", "t1", ["Subject: Hello", "", "hi"]))
        main([])
        assert out.getvalue().startswith(REGISTRATION)
        assert out.getvalue().endswith(b"filter-result|s1|t1|proceed\n")

    def test_literal_file_rejects(self, stdio, tmp_path):
        words = tmp_path / "words.txt"
        words.write_text("badword\n")
        out = stdio(make_session_input("s1", "t1", ["Subject: a badword", "", "x"]))
        main(["literal", str(words)])
        assert out.getvalue().endswith(
            b"filter-result|s1|t1|reject|550 Blacklisted keyphrase found\n"
        )

    def test_options_may_follow_patterns(self, stdio, tmp_path):
        words = tmp_path / "words.txt"
        words.write_text("badword\n")
        out = stdio(make_session_input("s1", "t1", ["Subject: fine", "", "x"]))
        main(["literal", str(words), "--max-sessions", "10", "--max-buffer-bytes", "4096"])
        assert out.getvalue().endswith(b"filter-result|s1|t1|proceed\n")

    def test_unknown_kind_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["glob", "x.txt"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert 'Unknown kind of pattern (CLI argument #1), expected "literal"/"regex".' in captured.err
        assert captured.out == ""

    def test_missing_file_exits_1(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["regex", str(tmp_path / "nope.txt")])
        assert exc_info.value.code == 1
        assert "Inaccessible file (CLI argument #2)" in capsys.readouterr().err

    def test_dangling_kind_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["literal"])
        assert exc_info.value.code == 1
        assert "expected file" in capsys.readouterr().err

    def test_bad_regex_exits_1(self, capsys, tmp_path):
        patterns = tmp_path / "patterns.txt"
        patterns.write_text("fine\n(broken\n")
        with pytest.raises(SystemExit) as exc_info:
            main(["regex", str(patterns)])
        assert exc_info.value.code == 1
        assert "Invalid regular expression (CLI argument #2, line #2)" in capsys.readouterr().err

    def test_usage_error_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--max-sessions", "0"])
        assert exc_info.value.code == 1
        assert "must be positive" in capsys.readouterr().err

    def test_unknown_option_exits_1(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--no-such-option"])
        assert exc_info.value.code == 1


class TestExecutable:

    def test_rejects_blacklisted_subject(self, tmp_path):
        words = tmp_path / "words.txt"
        words.write_text("badword\n")
        proc = _run_executable(
            ["literal", str(words)],
            make_session_input("sess2", "tok2", [
                "From: sender@example.com",
                "Subject: This contains badword here",
                "",
                "Normal body.",
            ]),
        )
        assert proc.returncode == 0
        assert proc.stdout.startswith(REGISTRATION)
        assert b"filter-result|sess2|tok2|reject|550 Blacklisted keyphrase found\n" in proc.stdout
        assert b"Forbidden literal found in subject: badword" in proc.stderr
        assert b"Denying" in proc.stderr

    def test_regex_in_body_only_proceeds(self, tmp_path):
        patterns = tmp_path / "patterns.txt"
        patterns.write_text(r"sp[a@]m")
        proc = _run_executable(
            ["regex", str(patterns)],
            make_session_input("sess5", "tok5", [
                "From: sender@example.com",
                "Subject: Normal",
                "",
                "Buy sp@m now.",
            ]),
        )
        assert proc.returncode == 0
        assert b"filter-result|sess5|tok5|proceed\n" in proc.stdout
        assert b"Allowing" in proc.stderr

    def test_config_error_never_speaks_protocol(self):
        proc = _run_executable(["regex"], b"config|ready\n")
        assert proc.returncode == 1
        assert proc.stdout == b""
        assert b"Unexpected end of CLI arguments, expected file." in proc.stderr

    def test_quiet_hides_decisions(self):
        proc = _run_executable(["-q"], make_session_input("s", "t", ["Subject: x", "", "y"]))
        assert proc.returncode == 0
        assert b"filter-result|s|t|proceed\n" in proc.stdout
        assert b"Allowing" not in proc.stderr


class TestHelpAndEntryPoint:

    def _help_text(self, capsys) -> str:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        return " ".join(capsys.readouterr().out.split())

    def test_quiet_help_says_decisions_are_hidden(self, capsys):
        assert "Allowing/Denying lines are not shown" in self._help_text(capsys)

    def test_buffer_cap_help_says_late_subject_is_not_scanned(self, capsys):
        assert "A Subject header beyond the limit is not scanned" in self._help_text(capsys)

    def test_importing_main_module_does_not_run(self, monkeypatch):
        def _fail(*args, **kwargs):
            raise AssertionError("main() ran on import")

        monkeypatch.setattr("contentfilter.cli.main", _fail)
        monkeypatch.delitem(sys.modules, "contentfilter.__main__", raising=False)
        module = importlib.import_module("contentfilter.__main__")
        assert module.main is _fail
