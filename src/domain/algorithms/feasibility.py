from __future__ import annotations

from collections.abc import Iterable, Sequence

from src.domain.models import FeasibilityLevel, FeasibilityScore, StopReport

PERFECT_SCORE = 10
DEFAULT_SEVERITY = 5

_MESSAGES = {
    FeasibilityLevel.GOOD: "Route conditions are good",
    FeasibilityLevel.MODERATE: "Some issues reported on this route",
    FeasibilityLevel.POOR: "Multiple issues reported on this route",
}


def report_counts(report: StopReport) -> bool:
    return report.status == "active" and report.net_votes >= 0


def level_for(score: int) -> FeasibilityLevel:
    if score >= 7:
        return FeasibilityLevel.GOOD
    if score >= 4:
        return FeasibilityLevel.MODERATE
    return FeasibilityLevel.POOR


def score_feasibility(
    stop_ids: Sequence[str], reports: Iterable[StopReport]
) -> FeasibilityScore:
    """Aggregate stop reports into a 1-10 route score.

    Each counted report contributes `10 - severity` to every requested stop
    it touches; stops are averaged individually and then together. A stop
    with no reports scores a perfect 10.
    """

    wanted = list(dict.fromkeys(s for s in stop_ids if s))
    values_by_stop: dict[str, list[int]] = {s: [] for s in wanted}
    counted: set[str] = set()

    for report in reports:
        if not report_counts(report):
            continue
        severity = report.severity if report.severity is not None else DEFAULT_SEVERITY
        severity = max(0, min(PERFECT_SCORE, int(severity)))
        for stop_id in report.stop_ids:
            if stop_id in values_by_stop:
                values_by_stop[stop_id].append(PERFECT_SCORE - severity)
                counted.add(report.report_id)

    if not counted:
        return FeasibilityScore(
            score=PERFECT_SCORE,
            level=FeasibilityLevel.GOOD,
            message="No issues reported on this route",
            report_count=0,
        )

    per_stop = [
        (sum(values) / len(values)) if values else float(PERFECT_SCORE)
        for values in values_by_stop.values()
    ]
    # Round half up to match whole-number display.
    score = int(sum(per_stop) / len(per_stop) + 0.5)
    score = max(1, min(PERFECT_SCORE, score))
    level = level_for(score)
    return FeasibilityScore(
        score=score, level=level, message=_MESSAGES[level], report_count=len(counted)
    )
