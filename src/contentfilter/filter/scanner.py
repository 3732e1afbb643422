"""ContentScanner: run the blacklist over one text field.

Algorithm:
  1. No text -> ALLOW, nothing evaluated
  2. Evaluate every matcher in blacklist order
  3. Each hit is logged and flips the verdict to DENY
  4. Keep going after the first hit, so one message reports every
     pattern it violates

The scanner holds only the immutable blacklist; scan() has no side
effects beyond logging.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from contentfilter.domain.decisions import Verdict
from contentfilter.domain.matchers import Blacklist, Matcher

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Verdict plus every matcher that fired, in blacklist order."""
    verdict: Verdict
    hits: list[Matcher] = field(default_factory=list)


class ContentScanner:
    """Evaluates a blacklist against optional text fields.

    Usage:
        scanner = ContentScanner(blacklist)
        result = scanner.scan(headers.subject, "subject")
    """

    def __init__(self, blacklist: Blacklist) -> None:
        self._blacklist = tuple(blacklist)

    @property
    def blacklist(self) -> Blacklist:
        return self._blacklist

    def scan(self, text: str | None, field_name: str = "subject") -> ScanResult:
        """Check ``text`` against every matcher.

        ``field_name`` only labels the diagnostics.
        """
        result = ScanResult(verdict=Verdict.ALLOW)
        if text is None:
            return result

        for matcher in self._blacklist:
            if not matcher.matches(text):
                continue
            log.warning(
                "Forbidden %s found in %s: %s",
                matcher.kind.value, field_name, matcher.pattern,
            )
            result.hits.append(matcher)
            result.verdict = Verdict.DENY

        return result
