from __future__ import annotations

from typing import Sequence


class TrustFixError(Exception):
    """Base error for callers that want a single exception type to catch."""


class UnknownScenarioError(TrustFixError, ValueError):
    def __init__(self, name: str, known: Sequence[str]) -> None:
        super().__init__(f"unknown scenario {name!r} (expected one of: {', '.join(known)})")
        self.name = name
        self.known = tuple(known)
