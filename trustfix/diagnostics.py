"""Evaluate a health snapshot against the v1 rule table and derive scores."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .formatting import format_bytes
from .system_state import Snapshot

logger = logging.getLogger(__name__)

PERFORMANCE_BASE = 100
STABILITY_BASE = 90
# v1: Stability/Security are conservative placeholders.
SECURITY_BASE = 85

LOW_DISK_PERCENT = 10
MAX_STARTUP_APPS = 12
HIGH_RAM_PERCENT = 85
CRITICAL_RAM_PERCENT = 92


class Severity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"


class Impact(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class Finding:
    id: str
    title: str
    description: str
    severity: Severity
    evidence: str
    recommendation: str
    impact: Impact = Impact.MEDIUM
    reclaimable_bytes: Optional[int] = None


@dataclass(frozen=True)
class ScoreSummary:
    performance: int
    stability: int
    security: int


@dataclass(frozen=True)
class Report:
    scores: ScoreSummary
    findings: Tuple[Finding, ...] = ()


def _no_penalty(snapshot: Snapshot) -> int:
    return 0


@dataclass(frozen=True)
class Rule:
    """One row of the rule table.

    ``applies`` decides whether the rule fires. When it does, a ``Finding`` is
    built from the static copy plus ``severity`` and ``evidence``, and the
    penalties are subtracted from the base scores.
    """

    id: str
    title: str
    description: str
    recommendation: str
    impact: Impact
    applies: Callable[[Snapshot], bool]
    severity: Callable[[Snapshot], Severity]
    evidence: Callable[[Snapshot], str]
    performance_penalty: Callable[[Snapshot], int] = _no_penalty
    stability_penalty: Callable[[Snapshot], int] = _no_penalty

    def finding(self, snapshot: Snapshot) -> Finding:
        return Finding(
            id=self.id,
            title=self.title,
            description=self.description,
            severity=self.severity(snapshot),
            evidence=self.evidence(snapshot),
            recommendation=self.recommendation,
            impact=self.impact,
        )


def _ram_is_critical(snapshot: Snapshot) -> bool:
    return snapshot.ram_used_percent > CRITICAL_RAM_PERCENT


# Order is authoritative: findings are reported in this order.
RULES: Sequence[Rule] = (
    Rule(
        id="storage.low_free_space",
        title="Low disk space on system drive",
        description="Low free space can slow down the system and cause update failures.",
        recommendation="Run Safe Cleanup (temp/cache/recycle bin) and move large files off the system drive.",
        impact=Impact.HIGH,
        applies=lambda s: s.disk_free_percent < LOW_DISK_PERCENT,
        severity=lambda s: Severity.CRITICAL,
        evidence=lambda s: f"Free space is {s.disk_free_percent:.1f}% (~{format_bytes(s.disk_free_bytes)}).",
        performance_penalty=lambda s: 30,
        stability_penalty=lambda s: 10,
    ),
    Rule(
        id="startup.too_many_apps",
        title="Too many apps start with Windows",
        description="Excess startup apps increase boot time and waste RAM/CPU in the background.",
        recommendation="Disable non-essential startup apps (keep drivers/security tools enabled).",
        impact=Impact.MEDIUM,
        applies=lambda s: s.startup_app_count > MAX_STARTUP_APPS,
        severity=lambda s: Severity.WARNING,
        evidence=lambda s: f"Detected {s.startup_app_count} startup apps.",
        performance_penalty=lambda s: 10,
    ),
    Rule(
        id="memory.high_usage",
        title="High memory usage",
        description="When RAM is near full, Windows starts paging to disk, making everything feel slow.",
        recommendation="Close heavy apps/tabs, reduce background apps, and consider upgrading RAM if this is frequent.",
        impact=Impact.HIGH,
        applies=lambda s: s.ram_used_percent > HIGH_RAM_PERCENT,
        severity=lambda s: Severity.CRITICAL if _ram_is_critical(s) else Severity.WARNING,
        evidence=lambda s: f"RAM usage is {s.ram_used_percent:.1f}%.",
        performance_penalty=lambda s: 20 if _ram_is_critical(s) else 10,
    ),
)


def clamp(value: int) -> int:
    return max(0, min(100, value))


def evaluate(snapshot: Snapshot, rules: Sequence[Rule] = RULES) -> Report:
    """Apply every rule to ``snapshot`` and return the findings and scores."""
    findings: List[Finding] = []
    performance = PERFORMANCE_BASE
    stability = STABILITY_BASE

    for rule in rules:
        if not rule.applies(snapshot):
            continue
        logger.debug("rule %s fired", rule.id)
        findings.append(rule.finding(snapshot))
        performance -= rule.performance_penalty(snapshot)
        stability -= rule.stability_penalty(snapshot)

    scores = ScoreSummary(
        performance=clamp(performance),
        stability=clamp(stability),
        security=clamp(SECURITY_BASE),
    )
    logger.debug("scores: %s", scores)
    return Report(scores=scores, findings=tuple(findings))


def report_to_dict(report: Report) -> Dict[str, Any]:
    return {
        "scores": asdict(report.scores),
        "findings": [
            {**asdict(finding), "severity": _plain(finding.severity), "impact": _plain(finding.impact)}
            for finding in report.findings
        ],
    }


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value
