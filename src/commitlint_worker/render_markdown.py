"""Render the commit report into the markdown body of the bot's PR comment.

Format:
  There were the following issues with this Pull Request
  * Commit: <sha>
    - ✖ error (rule)
    - ⚠ warning (rule)
  Guidance footer
"""
from __future__ import annotations

from typing import Sequence

from shared.constants import MAX_COMMENT_LENGTH
from shared.schema import CommitReport, LintProblem

_HEADER = "There were the following issues with this Pull Request\n"

_FOOTER = (
    "\nYou may need to [change the commit messages]"
    "(https://help.github.com/articles/changing-a-commit-message/) "
    "to comply with the repository contributing guidelines.\n"
)

_TRUNCATED = "\n*[Report truncated due to size limits]*\n"


def _problem_line(symbol: str, problem: LintProblem) -> str:
    return f"  - {symbol} {problem.message} (`{problem.name}`)\n"


def render_report_comment(commits: Sequence[CommitReport]) -> str:
    parts: list[str] = [_HEADER]
    for commit in commits:
        parts.append(f"* Commit: {commit.sha}\n")
        parts.extend(_problem_line("✖", error) for error in commit.errors)
        parts.extend(_problem_line("⚠", warning) for warning in commit.warnings)
    body = "".join(parts)

    limit = MAX_COMMENT_LENGTH - len(_FOOTER) - len(_TRUNCATED)
    if len(body) > limit:
        body = body[:limit].rsplit("\n", 1)[0] + "\n" + _TRUNCATED

    return body + _FOOTER
