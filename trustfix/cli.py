"""Entry point for the trustfix command line tool."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, Dict, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .diagnostics import Report, evaluate, report_to_dict
from .formatting import format_bytes
from .report import render_html, render_text, summarize
from .system_state import SCENARIOS, Snapshot, mock_snapshot, snapshot_to_dict

logger = logging.getLogger(__name__)

_BUCKET_STYLES = {"good": "bold green", "ok": "bold yellow", "bad": "bold red"}
_SEVERITY_STYLES = {"critical": "bold red", "warning": "bold yellow", "info": "bold blue"}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="trustfix",
        description="Evaluate a system health snapshot and recommend fixes.",
    )
    parser.add_argument(
        "scenario", nargs="?", default="slow", choices=sorted(SCENARIOS), help="mock snapshot to evaluate"
    )
    parser.add_argument("--json", action="store_true", help="print the snapshot, scores and findings as JSON")
    parser.add_argument("--ui", action="store_true", help="render the report with a Rich terminal UI")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--html", metavar="PATH", help="where to write the HTML report")
    output.add_argument("--no-html", action="store_true", help="do not write the HTML report")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    snapshot = mock_snapshot(args.scenario)
    report = evaluate(snapshot)

    if args.json:
        print(_to_json(snapshot, report))
        return 0

    if args.ui:
        _render_rich(snapshot, report)
    else:
        print(render_text(report, snapshot))

    if args.no_html:
        return 0

    output_path = Path(args.html) if args.html else Path.cwd() / f"trustfix-report-{args.scenario}.html"
    try:
        output_path.write_text(render_html(report, snapshot), encoding="utf-8")
    except OSError as exc:
        logger.error("could not write HTML report to %s: %s", output_path, exc)
        print(f"Failed to write HTML report: {exc}", file=sys.stderr)
        return 1

    logger.info("wrote HTML report to %s", output_path)
    print(f"\nHTML report generated: {output_path}")
    return 0


def _to_json(snapshot: Snapshot, report: Report) -> str:
    payload: Dict[str, Any] = {"snapshot": snapshot_to_dict(snapshot), **report_to_dict(report)}
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _render_rich(snapshot: Snapshot, report: Report) -> None:
    console = Console()
    summary = summarize(report, snapshot)
    bucket = summary.overall_class.value

    console.print(Panel(f"System snapshot - {snapshot.captured_at:%Y-%m-%d %H:%M:%S}", style="bold cyan"))

    metrics = Table(show_header=False, box=box.ROUNDED)
    metrics.add_row("Disk free", f"{snapshot.disk_free_percent:.1f}% | {format_bytes(snapshot.disk_free_bytes)}")
    metrics.add_row("Startup apps", str(snapshot.startup_app_count))
    metrics.add_row("RAM used", f"{snapshot.ram_used_percent:.1f}%")
    console.print(metrics)

    console.print(
        Panel(
            f"{summary.overall_title}\n{summary.overall_subtitle}\n"
            f"Worst score: {summary.worst_score}/100 | "
            f"Estimated improvement: +{summary.improvement} (Performance ≈ {summary.performance_after}/100)",
            style=_BUCKET_STYLES.get(bucket, "bold"),
        )
    )

    scores = Table(title="Scores", box=box.SIMPLE_HEAD)
    scores.add_column("Score", style="bold")
    scores.add_column("Value", justify="right")
    scores.add_column("Status")
    for badge in summary.scores:
        scores.add_row(badge.label, f"{badge.score} / 100", badge.bucket.value)
    console.print(scores)

    if not summary.findings:
        console.print(Panel("No issues found. Your system looks healthy.", style="bold green"))
        return

    findings = Table(title="Findings", box=box.SIMPLE_HEAD)
    findings.add_column("Severity")
    findings.add_column("Problem", style="bold")
    findings.add_column("Evidence")
    findings.add_column("Recommendation")
    findings.add_column("Impact")
    for view in summary.findings:
        findings.add_row(
            view.severity_label,
            view.finding.title,
            view.finding.evidence,
            view.finding.recommendation,
            view.impact.label,
            style=_SEVERITY_STYLES.get(view.severity_class),
        )
    console.print(findings)


if __name__ == "__main__":
    sys.exit(main())
