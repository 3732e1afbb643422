"""Shared fixtures for blacklist loading tests."""
from __future__ import annotations

import pytest


@pytest.fixture()
def pattern_file(tmp_path):
    """Factory writing a pattern file and returning its path as str.

    Accepts str (written as UTF-8) or raw bytes.
    """
    counter = 0

    def _write(content: str | bytes, name: str | None = None) -> str:
        nonlocal counter
        counter += 1
        path = tmp_path / (name or f"patterns-{counter}.txt")
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return str(path)

    return _write
