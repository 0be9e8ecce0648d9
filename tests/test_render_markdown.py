from commitlint_worker.render_markdown import render_report_comment
from shared.constants import MAX_COMMENT_LENGTH
from shared.schema import CommitReport, LintProblem


def _report(sha: str, errors: int = 1, warnings: int = 0) -> CommitReport:
    return CommitReport(
        sha=sha,
        errors=[LintProblem(level=2, name="type-empty", message="type may not be empty")] * errors,
        warnings=[LintProblem(level=1, name="body-leading-blank", message="body must have leading blank line")] * warnings,
    )


def test_render_lists_errors_before_warnings_per_commit() -> None:
    body = render_report_comment([_report("abc123", errors=1, warnings=1), _report("def456", errors=0, warnings=1)])

    assert body.startswith("There were the following issues with this Pull Request\n")
    assert "* Commit: abc123\n  - ✖ type may not be empty (`type-empty`)\n  - ⚠ body must have" in body
    assert "* Commit: def456\n  - ⚠ body must have leading blank line (`body-leading-blank`)\n" in body
    assert body.index("abc123") < body.index("def456")
    assert "change the commit messages" in body


def test_render_truncates_huge_reports() -> None:
    commits = [_report(f"{i:040d}", errors=5, warnings=5) for i in range(1000)]

    body = render_report_comment(commits)

    assert len(body) <= MAX_COMMENT_LENGTH
    assert "Report truncated" in body
    assert body.endswith("contributing guidelines.\n")
