from __future__ import annotations

from typing import Callable, Iterable, Mapping

from commitlint_worker.normalize import strip_ticket_prefix
from shared.schema import CommitRecord, CommitReport, LintOutcome, Report, RuleSetting

Linter = Callable[[str, Mapping[str, RuleSetting]], LintOutcome]


def fold_commit(report: Report, commit: CommitRecord, outcome: LintOutcome) -> Report:
    """Return ``report`` extended with one commit's lint outcome.

    Commits without findings still count toward validity but are left out of
    the detail list.
    """
    valid = report.valid and outcome.valid
    if not outcome.errors and not outcome.warnings:
        return report.model_copy(update={"valid": valid})

    entry = CommitReport(sha=commit.sha, errors=list(outcome.errors), warnings=list(outcome.warnings))
    return report.model_copy(
        update={
            "valid": valid,
            "commits": report.commits + (entry,),
            "errors_count": report.errors_count + len(outcome.errors),
            "warnings_count": report.warnings_count + len(outcome.warnings),
        }
    )


def fold_page(
    report: Report,
    commits: Iterable[CommitRecord],
    rules: Mapping[str, RuleSetting],
    linter: Linter,
) -> Report:
    for commit in commits:
        outcome = linter(strip_ticket_prefix(commit.message), rules)
        report = fold_commit(report, commit, outcome)
    return report


def status_state(report: Report) -> str:
    return "success" if report.valid else "failure"


def status_description(report: Report) -> str:
    return f"found {report.errors_count} problems, {report.warnings_count} warnings"
