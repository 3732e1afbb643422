"""Commit-time verdicts and their protocol wording."""
from enum import Enum


class Verdict(Enum):
    ALLOW = b"proceed"
    DENY = b"reject|550 Blacklisted keyphrase found"

    def is_permitted(self) -> bool:
        """Returns True only for ALLOW."""
        return self is Verdict.ALLOW

    @property
    def response(self) -> bytes:
        """The tail of the filter-result line for this verdict."""
        return self.value
