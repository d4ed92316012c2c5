"""Console-friendly formatting utilities."""

from __future__ import annotations

from typing import Sequence

from .system_state import Snapshot

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(num: float) -> str:
    value = float(num)
    for unit in _BYTE_UNITS:
        if value < 1024 or unit == _BYTE_UNITS[-1]:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} {_BYTE_UNITS[-1]}"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = []
    lines.append(_format_row(headers, widths))
    lines.append(_format_row(["-" * w for w in widths], widths))
    for row in rows:
        lines.append(_format_row(row, widths))
    return "\n".join(lines)


def format_snapshot(snapshot: Snapshot) -> str:
    rows = [
        ["Disk free", f"{snapshot.disk_free_percent:.1f}% ({format_bytes(snapshot.disk_free_bytes)})"],
        ["Startup apps", str(snapshot.startup_app_count)],
        ["RAM used", f"{snapshot.ram_used_percent:.1f}%"],
    ]
    return "\n".join(
        [
            f"Captured at: {snapshot.captured_at:%Y-%m-%d %H:%M:%S}",
            render_table(["Metric", "Value"], rows),
        ]
    )


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(row, widths)]
    return " | ".join(padded)
