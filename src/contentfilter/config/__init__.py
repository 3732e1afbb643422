"""Startup configuration: blacklist loading from CLI arguments."""

from contentfilter.config.blacklist import (
    BlacklistError,
    EmptyFileName,
    InaccessibleFile,
    InvalidRegex,
    MissingPatternFile,
    UnknownMatcherKind,
    UnreadableLine,
    load_blacklist,
)

__all__ = [
    "BlacklistError",
    "EmptyFileName",
    "InaccessibleFile",
    "InvalidRegex",
    "MissingPatternFile",
    "UnknownMatcherKind",
    "UnreadableLine",
    "load_blacklist",
]
