"""contentfilter CLI entry point.

Usage: contentfilter [options] [literal|regex FILE]...

Meant to be started by OpenSMTPD from smtpd.conf:

    filter "contentstrings" proc-exec "contentfilter literal /etc/mail/badwords"
"""
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from typing import BinaryIO, NoReturn

from contentfilter import __version__
from contentfilter.config.blacklist import BlacklistError, load_blacklist
from contentfilter.domain.matchers import Blacklist
from contentfilter.filter.dispatcher import ProtocolDispatcher
from contentfilter.filter.sessions import SessionStore

log = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse, but usage errors exit 1 like every other startup error."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="contentfilter",
        description=(
            "OpenSMTPD filter that rejects mail whose Subject matches a "
            "blacklisted literal or regular expression."
        ),
    )
    p.add_argument(
        "patterns", nargs="*", metavar="KIND_FILE",
        help='Alternating pattern kind ("literal" or "regex") and a file '
             "with one pattern per line.",
    )
    p.add_argument(
        "--max-buffer-bytes", type=_positive_int, default=None,
        help="Stop buffering a message past this many bytes (default: no "
             "limit). A Subject header beyond the limit is not scanned, "
             "so such a message is let through.",
    )
    p.add_argument(
        "--max-sessions", type=_positive_int, default=None,
        help="Drop the oldest open session past this many (default: no limit)",
    )
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log protocol details as well as decisions.",
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true",
        help="Log only matches and problems; the per-message "
             "Allowing/Denying lines are not shown.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _configure_logging(args: argparse.Namespace) -> None:
    # stdout belongs to the protocol; every diagnostic goes to stderr.
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(stream=sys.stderr, level=level, format="%(message)s")


def serve(
    blacklist: Blacklist,
    args: argparse.Namespace,
    stdin: BinaryIO,
    stdout: BinaryIO,
) -> None:
    """Serve the filter protocol until EOF."""
    log.debug("Blacklist holds %d pattern(s)", len(blacklist))
    sessions = SessionStore(
        max_buffer_bytes=args.max_buffer_bytes,
        max_sessions=args.max_sessions,
    )
    ProtocolDispatcher(blacklist, stdin, stdout, sessions=sessions).run()


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_intermixed_args(argv)
    _configure_logging(args)

    # A bad blacklist stops us before the MTA sees a single response.
    try:
        blacklist = load_blacklist(args.patterns)
    except BlacklistError as exc:
        parser.exit(1, f"{exc}\n")

    serve(blacklist, args, sys.stdin.buffer, sys.stdout.buffer)
