"""Snapshot of the machine health metrics that the evaluator consumes."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from .errors import UnknownScenarioError

GIB = 1024**3


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Snapshot:
    disk_free_percent: float
    disk_free_bytes: int
    startup_app_count: int
    ram_used_percent: float
    captured_at: datetime = field(default_factory=_utc_now)


def slow_laptop() -> Snapshot:
    return Snapshot(
        disk_free_percent=7.8,
        disk_free_bytes=12 * GIB,
        startup_app_count=18,
        ram_used_percent=82.5,
    )


def ram_pressure() -> Snapshot:
    return Snapshot(
        disk_free_percent=22.0,
        disk_free_bytes=80 * GIB,
        startup_app_count=6,
        ram_used_percent=92.0,
    )


SCENARIOS: Dict[str, Callable[[], Snapshot]] = {
    "slow": slow_laptop,
    "ram": ram_pressure,
}


def mock_snapshot(name: str = "slow") -> Snapshot:
    """Return the built-in scenario called ``name`` (case-insensitive)."""
    try:
        factory = SCENARIOS[name.lower()]
    except KeyError:
        raise UnknownScenarioError(name, sorted(SCENARIOS)) from None
    return factory()


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    snapshot_dict: Dict[str, Any] = asdict(snapshot)
    snapshot_dict["captured_at"] = snapshot.captured_at.isoformat()
    return snapshot_dict
