"""Render an evaluation report as console text or a self-contained HTML page.

Both documents are built from the same :class:`ReportSummary`, which carries
the presentation heuristics derived from a report and its snapshot:

* the overall bucket (``good``/``ok``/``bad``) of the worst of the three scores,
* the estimated Performance gain if every recommendation is applied,
* an impact-estimate label per finding, keyed on the finding id.

Findings are always rendered in the order the evaluator produced them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Environment

from .diagnostics import Finding, Report, Severity
from .formatting import format_snapshot, render_table
from .system_state import Snapshot

logger = logging.getLogger(__name__)

REPORT_TITLE = "TrustFix – System Health Report"

GOOD_SCORE = 80
OK_SCORE = 60

IMPROVEMENT_CAP = 40
STARTUP_BASELINE = 10
STARTUP_GAIN_CAP = 14


class Bucket(str, Enum):
    GOOD = "good"
    OK = "ok"
    BAD = "bad"


def score_class(score: int) -> Bucket:
    if score >= GOOD_SCORE:
        return Bucket.GOOD
    if score >= OK_SCORE:
        return Bucket.OK
    return Bucket.BAD


OVERALL_COPY: Dict[Bucket, Tuple[str, str]] = {
    Bucket.GOOD: ("All good", "Your system looks healthy. Keep it up."),
    Bucket.OK: ("Needs attention", "Your system is usable, but a few fixes will improve it."),
    Bucket.BAD: ("Action recommended", "Your system needs fixes to avoid slowdowns or issues."),
}


@dataclass(frozen=True)
class ImpactEstimate:
    label: str
    css_class: str


IMPACT_ESTIMATES: Dict[str, ImpactEstimate] = {
    "storage.low_free_space": ImpactEstimate("High impact: smoother system & fewer update errors", "impact-high"),
    "startup.too_many_apps": ImpactEstimate("Medium impact: faster boot & less background load", "impact-medium"),
    "memory.high_usage": ImpactEstimate("High impact: fewer freezes & better responsiveness", "impact-high"),
}
DEFAULT_IMPACT_ESTIMATE = ImpactEstimate("Low impact: small improvement", "impact-low")

_SEVERITY_CLASSES: Dict[Any, str] = {
    Severity.CRITICAL: "critical",
    Severity.WARNING: "warning",
    Severity.INFO: "info",
}


def impact_estimate(finding_id: str) -> ImpactEstimate:
    return IMPACT_ESTIMATES.get(finding_id, DEFAULT_IMPACT_ESTIMATE)


def severity_class(severity: Any) -> str:
    """CSS class for ``severity``; anything unexpected gets no special styling."""
    try:
        return _SEVERITY_CLASSES.get(severity, "")
    except TypeError:
        return ""


def estimate_improvement(snapshot: Snapshot) -> int:
    """Estimated Performance points gained if the recommendations are applied.

    Each metric contributes independently and the total is capped, so the
    estimate only grows as disk space shrinks, startup apps pile up or RAM
    fills, and never exceeds ``IMPROVEMENT_CAP``.
    """
    gain = 0

    if snapshot.disk_free_percent < 5:
        gain += 25
    elif snapshot.disk_free_percent < 10:
        gain += 20
    elif snapshot.disk_free_percent < 15:
        gain += 12
    elif snapshot.disk_free_percent < 20:
        gain += 6

    if snapshot.startup_app_count > STARTUP_BASELINE:
        extra = snapshot.startup_app_count - STARTUP_BASELINE
        gain += min(STARTUP_GAIN_CAP, extra * 2)

    if snapshot.ram_used_percent > 95:
        gain += 18
    elif snapshot.ram_used_percent > 90:
        gain += 12
    elif snapshot.ram_used_percent > 85:
        gain += 6

    return min(gain, IMPROVEMENT_CAP)


@dataclass(frozen=True)
class ScoreBadge:
    label: str
    score: int
    bucket: Bucket


@dataclass(frozen=True)
class FindingView:
    finding: Finding
    severity_label: str
    severity_class: str
    impact: ImpactEstimate


@dataclass(frozen=True)
class ReportSummary:
    worst_score: int
    overall_class: Bucket
    overall_title: str
    overall_subtitle: str
    improvement: int
    performance_after: int
    scores: Tuple[ScoreBadge, ...]
    findings: Tuple[FindingView, ...]


def summarize(report: Report, snapshot: Snapshot) -> ReportSummary:
    scores = report.scores
    worst_score = min(scores.performance, scores.stability, scores.security)
    overall_class = score_class(worst_score)
    title, subtitle = OVERALL_COPY[overall_class]
    improvement = estimate_improvement(snapshot)
    logger.debug("worst score %d -> %s, improvement +%d", worst_score, overall_class.value, improvement)

    return ReportSummary(
        worst_score=worst_score,
        overall_class=overall_class,
        overall_title=title,
        overall_subtitle=subtitle,
        improvement=improvement,
        performance_after=min(100, scores.performance + improvement),
        scores=(
            ScoreBadge("Performance", scores.performance, score_class(scores.performance)),
            ScoreBadge("Stability", scores.stability, score_class(scores.stability)),
            ScoreBadge("Security", scores.security, score_class(scores.security)),
        ),
        findings=tuple(
            FindingView(
                finding=finding,
                severity_label=_label(finding.severity),
                severity_class=severity_class(finding.severity),
                impact=impact_estimate(finding.id),
            )
            for finding in report.findings or ()
        ),
    )


def snapshot_highlights(snapshot: Snapshot) -> Tuple[str, str]:
    return (
        f"{snapshot.disk_free_percent:.1f}% disk free • {snapshot.startup_app_count} startup apps",
        f"{snapshot.ram_used_percent:.1f}%",
    )


def render_text(report: Report, snapshot: Snapshot, generated_at: Optional[datetime] = None) -> str:
    summary = summarize(report, snapshot)
    generated_at = generated_at or datetime.now()

    lines: List[str] = [
        REPORT_TITLE,
        f"Generated at: {generated_at:%Y-%m-%d %H:%M:%S}",
        "",
        f"Overall: {summary.overall_title} ({summary.overall_class.value})",
        summary.overall_subtitle,
        f"Worst score: {summary.worst_score}/100",
        f"Estimated improvement (Performance): +{summary.improvement} points"
        f" (approx. {summary.performance_after}/100 after fixes)",
        "",
        "Snapshot:",
        format_snapshot(snapshot),
        "",
        "Scores:",
        render_table(
            ["Score", "Value", "Status"],
            [[badge.label, f"{badge.score} / 100", badge.bucket.value] for badge in summary.scores],
        ),
        "",
        "Recommended actions:",
    ]
    if not summary.findings:
        lines.append("  (none)")
    for index, view in enumerate(summary.findings, start=1):
        lines.append(f"{index}. {view.finding.title}")
        lines.append(f"   {view.finding.recommendation}")

    lines.extend(["", "Findings:"])
    if not summary.findings:
        lines.append("  No issues found.")
    for view in summary.findings:
        finding = view.finding
        lines.append(f"[{view.severity_label}] {finding.title} ({view.impact.label})")
        lines.append(f"   {finding.description}")
        lines.append(f"   - Evidence: {finding.evidence}")
        lines.append(f"   - Recommendation: {finding.recommendation}")
    return "\n".join(lines)


_HTML_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ title }}</title>
<style>
body { font-family: Arial, sans-serif; background:#f5f7fa; padding:30px; }
.card { background:#fff; border-radius:14px; padding:20px; margin-bottom:18px; box-shadow:0 1px 10px rgba(0,0,0,.06); }
h1 { margin:0 0 8px 0; }
h2 { margin:0 0 12px 0; }
h3 { margin:0 0 6px 0; }
.meta { color:#666; }
.actionbar { position:sticky; top:14px; z-index:999; display:flex; justify-content:flex-end; gap:10px; padding:10px;
  border-radius:14px; background:rgba(255,255,255,0.9); backdrop-filter:blur(8px); box-shadow:0 1px 10px rgba(0,0,0,.06); margin-bottom:18px; }
.btn { text-decoration:none; padding:10px 14px; border-radius:10px; font-weight:800; background:#111; color:#fff; }
.btn-secondary { background:#444; }
.overall { border-left:12px solid #ccc; }
.overall.good { border-left-color:#27ae60; background:#f3fbf6; }
.overall.ok   { border-left-color:#f1c40f; background:#fffaf0; }
.overall.bad  { border-left-color:#e74c3c; background:#fff4f4; }
.overall-title { font-size:22px; font-weight:800; }
.pill { display:inline-block; padding:6px 10px; border-radius:999px; font-weight:900; font-size:12px; background:#eee; }
.pill.good { background:#dff3e6; }
.pill.ok   { background:#fff2c2; }
.pill.bad  { background:#ffd6d6; }
.kpi-row { display:flex; flex-wrap:wrap; gap:12px; margin-top:10px; }
.kpi { background:rgba(255,255,255,0.7); border:1px solid rgba(0,0,0,0.06); border-radius:12px; padding:12px 14px; min-width:240px; }
.kpi-label { color:#666; font-size:13px; }
.kpi-value { margin-top:6px; font-weight:900; font-size:18px; }
.kpi-sub { margin-top:4px; color:#666; font-size:12px; }
.scores { display:flex; gap:16px; flex-wrap:wrap; }
.scorebox { flex:1; min-width:220px; border-left:10px solid #ccc; }
.scorebox.good { border-left-color:#27ae60; background:#f3fbf6; }
.scorebox.ok   { border-left-color:#f1c40f; background:#fffaf0; }
.scorebox.bad  { border-left-color:#e74c3c; background:#fff4f4; }
.score { font-size:30px; font-weight:900; }
.label { color:#666; font-size:14px; }
.finding { border-left:6px solid #ddd; }
.finding.critical { border-left-color:#c0392b; }
.finding.warning  { border-left-color:#e67e22; }
.finding.info     { border-left-color:#2980b9; }
.impact-badge { display:inline-block; margin-left:10px; padding:4px 10px; border-radius:999px; font-size:12px; font-weight:900; }
.impact-high   { background:#ffd6d6; }
.impact-medium { background:#fff2c2; }
.impact-low    { background:#dff3e6; }
@media print {
  body { background:#fff; padding:0; }
  .actionbar { display:none; }
  .card { box-shadow:none; break-inside:avoid; }
}
</style>
</head>
<body>

<div class="card">
  <h1>{{ title }}</h1>
  <div class="meta">Generated at: {{ generated_at }}</div>
</div>

<div class="actionbar">
  <a class="btn" href="#recommended-actions">Recommended actions</a>
  <a class="btn btn-secondary" href="#" onclick="window.print(); return false;">Export as PDF</a>
</div>

<div class="card overall {{ summary.overall_class.value }}" id="overall">
  <div class="pill {{ summary.overall_class.value }}">Overall</div>
  <div class="overall-title">{{ summary.overall_title }}</div>
  <p>{{ summary.overall_subtitle }}</p>
  <div class="meta">Worst score: <b>{{ summary.worst_score }}/100</b></div>
  <div class="kpi-row">
    <div class="kpi">
      <div class="kpi-label">Estimated improvement (Performance)</div>
      <div class="kpi-value">+{{ summary.improvement }} points</div>
      <div class="kpi-sub">Estimated Performance after fixes: <b>{{ summary.performance_after }}/100</b></div>
    </div>
    <div class="kpi">
      <div class="kpi-label">Snapshot highlights</div>
      <div class="kpi-value">{{ highlights }}</div>
      <div class="kpi-sub">RAM used: <b>{{ ram }}</b></div>
    </div>
  </div>
</div>

<div class="card" id="scores">
<h2>Scores</h2>
<div class="scores">
{%- for badge in summary.scores %}
  <div class="card scorebox {{ badge.bucket.value }}">
    <div class="label">{{ badge.label }}</div>
    <div class="score">{{ badge.score }} / 100</div>
  </div>
{%- endfor %}
</div>
</div>

<div class="card" id="recommended-actions">
<h2>Recommended actions</h2>
<p class="meta">Estimated improvement if you apply the recommendations: <b>+{{ summary.improvement }} Performance</b> (to approx. <b>{{ summary.performance_after }}/100</b>).</p>
<ol>
{%- for view in summary.findings %}
<li><b>{{ view.finding.title }}</b><br/>{{ view.finding.recommendation }}</li>
{%- endfor %}
</ol>
</div>

<div class="card" id="findings">
<h2>Findings</h2>
{%- for view in summary.findings %}
<div class="card finding {{ view.severity_class }}">
  <h3>
    {{ view.finding.title }}
    <span class="impact-badge {{ view.impact.css_class }}">{{ view.impact.label }}</span>
  </h3>
  <p>{{ view.finding.description }}</p>
  <p><b>Evidence:</b> {{ view.finding.evidence }}</p>
  <p><b>Recommendation:</b> {{ view.finding.recommendation }}</p>
</div>
{%- endfor %}
</div>

</body>
</html>
"""

_environment = Environment(autoescape=True, keep_trailing_newline=True)
_template = _environment.from_string(_HTML_TEMPLATE)


def render_html(report: Report, snapshot: Snapshot, generated_at: Optional[datetime] = None) -> str:
    """Render the self-contained HTML report. Every text field is HTML-escaped."""
    summary = summarize(report, snapshot)
    generated_at = generated_at or datetime.now()
    highlights, ram = snapshot_highlights(snapshot)
    return _template.render(
        title=REPORT_TITLE,
        generated_at=f"{generated_at:%Y-%m-%d %H:%M:%S}",
        summary=summary,
        highlights=highlights,
        ram=ram,
    )


render = render_html


def _label(value: Any) -> str:
    return str(value.value) if isinstance(value, Enum) else str(value)
