"""Tests for react_a11y_ai/reports/issues.py"""

from react_a11y_ai.diagnostics import Issue, Severity, TextRange
from react_a11y_ai.reports.issues import _build_summary, build_report


def _issue(path="/ws/App.jsx", severity=Severity.ERROR, code="jsx-a11y/alt-text") -> Issue:
    return Issue(path, TextRange.at(2, 4), "msg", severity, code=code)


# ---------------------------------------------------------------------------
# _build_summary
# ---------------------------------------------------------------------------

def test_summary_counts_by_severity_and_rule():
    mapping = {
        "/ws/App.jsx": [_issue(), _issue(severity=Severity.WARNING, code="jsx-a11y/anchor-is-valid")],
        "/ws/Nav.tsx": [_issue("/ws/Nav.tsx")],
    }
    s = _build_summary(mapping)
    assert s["total"] == 3
    assert s["files"] == 2
    assert s["by_severity"] == {"error": 2, "warning": 1}
    assert s["by_rule"] == {"jsx-a11y/alt-text": 2, "jsx-a11y/anchor-is-valid": 1}


def test_summary_empty():
    s = _build_summary({})
    assert s["total"] == 0
    assert s["files"] == 0
    assert all(v == 0 for v in s["by_severity"].values())
    assert s["by_rule"] == {}


# ---------------------------------------------------------------------------
# build_report
# ---------------------------------------------------------------------------

def test_report_structure():
    report = build_report("/ws", {"/ws/App.jsx": [_issue()]})

    assert report["report_type"]      == "a11y_issues"
    assert report["workspace"]        == "/ws"
    assert report["summary"]["total"] == 1
    assert "generated_at" in report
    assert report["issues"] == [{
        "file":       "/ws/App.jsx",
        "line":       2,
        "column":     4,
        "end_column": 5,
        "severity":   "error",
        "source":     "react-a11y-ai",
        "code":       "jsx-a11y/alt-text",
        "message":    "msg",
    }]
