"""Accessibility issue report generator.

Functions:
    build_report(workspace, mapping)     -> dict
"""

from datetime import datetime, timezone

from react_a11y_ai.diagnostics import Issue, Severity


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_report(workspace: str, mapping: dict[str, list[Issue]]) -> dict:
    """Return a JSON-serialisable report of the issues from one check run."""
    issues = [issue for file_issues in mapping.values() for issue in file_issues]
    return {
        "report_type":  "a11y_issues",
        "workspace":    workspace,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "summary":      _build_summary(mapping),
        "issues":       [issue.to_dict() for issue in issues],
    }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _build_summary(mapping: dict[str, list[Issue]]) -> dict:
    by_severity = {s.value: 0 for s in Severity}
    by_rule: dict[str, int] = {}

    for file_issues in mapping.values():
        for issue in file_issues:
            by_severity[issue.severity.value] += 1
            by_rule[issue.code] = by_rule.get(issue.code, 0) + 1

    return {
        "total":       sum(by_severity.values()),
        "files":       len(mapping),
        "by_severity": by_severity,
        "by_rule":     dict(sorted(by_rule.items())),
    }
