from datetime import datetime

from trustfix.diagnostics import Finding, Report, ScoreSummary, Severity, evaluate
from trustfix.report import (
    Bucket,
    DEFAULT_IMPACT_ESTIMATE,
    estimate_improvement,
    impact_estimate,
    render,
    render_html,
    render_text,
    score_class,
    severity_class,
    summarize,
)
from trustfix.system_state import GIB, Snapshot

GENERATED_AT = datetime(2024, 5, 1, 9, 30, 0)


def make_snapshot(
    *,
    disk_free_percent: float = 50.0,
    disk_free_bytes: int = 200 * GIB,
    startup_app_count: int = 5,
    ram_used_percent: float = 40.0,
) -> Snapshot:
    return Snapshot(
        disk_free_percent=disk_free_percent,
        disk_free_bytes=disk_free_bytes,
        startup_app_count=startup_app_count,
        ram_used_percent=ram_used_percent,
    )


def section(html: str, section_id: str) -> str:
    start = html.index(f'id="{section_id}"')
    end = html.index("</div>\n\n", start)
    return html[start:end]


def test_score_class_thresholds():
    assert score_class(100) == Bucket.GOOD
    assert score_class(80) == Bucket.GOOD
    assert score_class(79) == Bucket.OK
    assert score_class(60) == Bucket.OK
    assert score_class(59) == Bucket.BAD
    assert score_class(0) == Bucket.BAD


def test_slow_laptop_summary():
    snapshot = make_snapshot(
        disk_free_percent=7.8, disk_free_bytes=12 * GIB, startup_app_count=18, ram_used_percent=82.5
    )
    summary = summarize(evaluate(snapshot), snapshot)

    assert summary.worst_score == 60
    assert summary.overall_class == Bucket.OK
    assert summary.overall_title == "Needs attention"
    assert summary.improvement == 20 + 14
    assert summary.performance_after == 94
    assert [badge.bucket for badge in summary.scores] == [Bucket.OK, Bucket.GOOD, Bucket.GOOD]


def test_ram_pressure_summary_is_good():
    snapshot = make_snapshot(disk_free_percent=22.0, startup_app_count=6, ram_used_percent=92.0)
    summary = summarize(evaluate(snapshot), snapshot)

    assert summary.worst_score == 85
    assert summary.overall_class == Bucket.GOOD
    assert summary.overall_title == "All good"
    assert summary.improvement == 12


def test_bad_bucket_copy():
    report = Report(scores=ScoreSummary(performance=40, stability=90, security=85))
    summary = summarize(report, make_snapshot())
    assert summary.overall_class == Bucket.BAD
    assert summary.overall_title == "Action recommended"


def test_improvement_is_capped():
    snapshot = make_snapshot(disk_free_percent=3.0, startup_app_count=20, ram_used_percent=97.0)
    assert estimate_improvement(snapshot) == 40


def test_improvement_is_zero_when_healthy():
    assert estimate_improvement(make_snapshot()) == 0


def test_improvement_contributions():
    assert estimate_improvement(make_snapshot(disk_free_percent=4.9)) == 25
    assert estimate_improvement(make_snapshot(disk_free_percent=5.0)) == 20
    assert estimate_improvement(make_snapshot(disk_free_percent=10.0)) == 12
    assert estimate_improvement(make_snapshot(disk_free_percent=15.0)) == 6
    assert estimate_improvement(make_snapshot(disk_free_percent=20.0)) == 0
    assert estimate_improvement(make_snapshot(startup_app_count=10)) == 0
    assert estimate_improvement(make_snapshot(startup_app_count=13)) == 6
    assert estimate_improvement(make_snapshot(startup_app_count=40)) == 14
    assert estimate_improvement(make_snapshot(ram_used_percent=85.0)) == 0
    assert estimate_improvement(make_snapshot(ram_used_percent=86.0)) == 6
    assert estimate_improvement(make_snapshot(ram_used_percent=91.0)) == 12
    assert estimate_improvement(make_snapshot(ram_used_percent=95.5)) == 18


def test_improvement_is_monotonic():
    disk_values = [100 - step * 0.5 for step in range(201)]
    gains = [estimate_improvement(make_snapshot(disk_free_percent=d)) for d in disk_values]
    assert gains == sorted(gains)

    gains = [estimate_improvement(make_snapshot(startup_app_count=n)) for n in range(60)]
    assert gains == sorted(gains)

    ram_values = [step * 0.5 for step in range(201)]
    gains = [estimate_improvement(make_snapshot(ram_used_percent=r, startup_app_count=30)) for r in ram_values]
    assert gains == sorted(gains)
    assert max(gains) <= 40


def test_performance_after_never_exceeds_100():
    report = Report(scores=ScoreSummary(performance=95, stability=90, security=85))
    summary = summarize(report, make_snapshot(disk_free_percent=2.0))
    assert summary.performance_after == 100


def test_impact_estimate_lookup():
    assert impact_estimate("storage.low_free_space").css_class == "impact-high"
    assert impact_estimate("startup.too_many_apps").label.startswith("Medium impact")
    assert impact_estimate("memory.high_usage").label.startswith("High impact")
    assert impact_estimate("network.unknown") == DEFAULT_IMPACT_ESTIMATE
    assert DEFAULT_IMPACT_ESTIMATE.label == "Low impact: small improvement"


def test_severity_class_falls_back_to_no_styling():
    assert severity_class(Severity.CRITICAL) == "critical"
    assert severity_class("Warning") == "warning"
    assert severity_class("Catastrophic") == ""
    assert severity_class(None) == ""
    assert severity_class(["not", "hashable"]) == ""


def test_html_contains_each_finding_once_per_section():
    snapshot = make_snapshot(disk_free_percent=3.0, disk_free_bytes=2 * GIB, startup_app_count=20, ram_used_percent=97.0)
    report = evaluate(snapshot)
    html = render_html(report, snapshot, generated_at=GENERATED_AT)

    actions = section(html, "recommended-actions")
    findings = section(html, "findings")
    for finding in report.findings:
        assert html.count(finding.evidence) == 1
        assert findings.count(finding.evidence) == 1
        assert actions.count(finding.title) == 1
        assert actions.count(finding.recommendation) == 1
        assert findings.count(finding.title) == 1
        assert findings.count(finding.recommendation) == 1


def test_html_preserves_report_order():
    snapshot = make_snapshot(disk_free_percent=3.0, startup_app_count=20, ram_used_percent=97.0)
    report = evaluate(snapshot)
    findings = section(render_html(report, snapshot, generated_at=GENERATED_AT), "findings")

    positions = [findings.index(finding.title) for finding in report.findings]
    assert positions == sorted(positions)


def test_html_structure():
    snapshot = make_snapshot(disk_free_percent=7.8, disk_free_bytes=12 * GIB, startup_app_count=18, ram_used_percent=82.5)
    html = render_html(evaluate(snapshot), snapshot, generated_at=GENERATED_AT)

    assert html.startswith("<!doctype html>")
    assert "<title>TrustFix – System Health Report</title>" in html
    assert "Generated at: 2024-05-01 09:30:00" in html
    assert 'href="#recommended-actions"' in html
    assert "window.print()" in html
    assert 'class="card overall ok"' in html
    assert "Worst score: <b>60/100</b>" in html
    assert "+34 points" in html
    assert "7.8% disk free • 18 startup apps" in html
    assert 'class="card scorebox ok"' in html
    assert 'class="card finding critical"' in html
    assert 'class="card finding warning"' in html
    assert "High impact: smoother system &amp; fewer update errors" in html


def test_html_escapes_finding_text():
    finding = Finding(
        id="custom.injected",
        title="<script>alert(1)</script>",
        description="Tom & Jerry",
        severity=Severity.INFO,
        evidence='value "quoted" <b>',
        recommendation="Use <em>care</em>",
    )
    report = Report(scores=ScoreSummary(performance=100, stability=90, security=85), findings=(finding,))
    html = render_html(report, make_snapshot(), generated_at=GENERATED_AT)

    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Tom &amp; Jerry" in html
    assert "value &#34;quoted&#34; &lt;b&gt;" in html
    assert "Use &lt;em&gt;care&lt;/em&gt;" in html
    assert "Low impact: small improvement" in html
    assert 'class="card finding info"' in html


def test_html_with_no_findings():
    snapshot = make_snapshot()
    html = render(evaluate(snapshot), snapshot, generated_at=GENERATED_AT)

    assert "<ol>\n</ol>" in html
    assert "finding " not in section(html, "findings")
    assert "All good" in html
    assert "+0 points" in html


def test_unknown_severity_and_impact_do_not_fail():
    finding = Finding(
        id="custom.odd",
        title="Odd finding",
        description="d",
        severity="Catastrophic",
        evidence="e",
        recommendation="r",
        impact="Enormous",
    )
    report = Report(scores=ScoreSummary(performance=70, stability=90, security=85), findings=(finding,))
    html = render_html(report, make_snapshot(), generated_at=GENERATED_AT)
    text = render_text(report, make_snapshot(), generated_at=GENERATED_AT)

    assert '<div class="card finding ">' in html
    assert "[Catastrophic] Odd finding" in text


def test_findings_may_be_none():
    report = Report(scores=ScoreSummary(performance=100, stability=90, security=85), findings=None)
    assert summarize(report, make_snapshot()).findings == ()


def test_text_report():
    snapshot = make_snapshot(disk_free_percent=22.0, disk_free_bytes=80 * GIB, startup_app_count=6, ram_used_percent=92.0)
    report = evaluate(snapshot)
    text = render_text(report, snapshot, generated_at=GENERATED_AT)

    assert text.splitlines()[0] == "TrustFix – System Health Report"
    assert "Generated at: 2024-05-01 09:30:00" in text
    assert "Overall: All good (good)" in text
    assert "Worst score: 85/100" in text
    assert "+12 points (approx. 100/100 after fixes)" in text
    assert "1. High memory usage" in text
    assert "[Warning] High memory usage (High impact: fewer freezes & better responsiveness)" in text
    assert text.count("RAM usage is 92.0%.") == 1


def test_text_report_without_findings():
    snapshot = make_snapshot()
    text = render_text(evaluate(snapshot), snapshot, generated_at=GENERATED_AT)
    assert "(none)" in text
    assert "No issues found." in text
