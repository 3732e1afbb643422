"""Shared type aliases used across the filter."""
from __future__ import annotations

from typing import TypeAlias

SessionId: TypeAlias = bytes   # opaque, assigned by the MTA
Token: TypeAlias = bytes       # opaque, echoed back untouched
Field: TypeAlias = bytes       # one "|"-separated protocol field
