from unittest.mock import MagicMock

import pytest

from commitlint_worker.comments import CommentAction, decide_comment_action, reconcile_comment
from shared.schema import CommentRef, CommitReport, InvocationContext, LintProblem, Report

CTX = InvocationContext(owner="o", repo="r", pull_number=5, head_sha="abc")
BOT = "commitlint[bot]"

PROBLEM_REPORT = Report(
    valid=False,
    commits=(CommitReport(sha="c1", errors=[LintProblem(level=2, name="type-empty", message="type may not be empty")]),),
    errors_count=1,
)


@pytest.mark.parametrize(
    ("existing", "has_problems", "expected"),
    [
        (None, True, CommentAction.CREATE),
        (None, False, CommentAction.NONE),
        (CommentRef(id=1), True, CommentAction.EDIT),
        (CommentRef(id=1), False, CommentAction.DELETE),
    ],
)
def test_decide_comment_action(existing, has_problems, expected) -> None:
    assert decide_comment_action(existing, has_problems) is expected


def _gh(existing=None) -> MagicMock:
    gh = MagicMock()
    gh.find_bot_comment.return_value = existing
    gh.create_issue_comment.return_value = {"id": 99}
    return gh


def test_reconcile_creates_comment() -> None:
    gh = _gh()

    action = reconcile_comment(gh, CTX, PROBLEM_REPORT, BOT, MagicMock())

    assert action is CommentAction.CREATE
    gh.find_bot_comment.assert_called_once_with("o", "r", 5, BOT)
    args = gh.create_issue_comment.call_args.args
    assert args[:3] == ("o", "r", 5)
    assert "c1" in args[3]
    gh.update_issue_comment.assert_not_called()
    gh.delete_issue_comment.assert_not_called()


def test_reconcile_edits_existing_comment() -> None:
    gh = _gh(CommentRef(id=7, author=BOT))

    reconcile_comment(gh, CTX, PROBLEM_REPORT, BOT, MagicMock())

    gh.update_issue_comment.assert_called_once()
    assert gh.update_issue_comment.call_args.args[:3] == ("o", "r", 7)
    gh.create_issue_comment.assert_not_called()
    gh.delete_issue_comment.assert_not_called()


def test_reconcile_deletes_stale_comment_when_clean() -> None:
    gh = _gh(CommentRef(id=7, author=BOT))

    reconcile_comment(gh, CTX, Report(), BOT, MagicMock())

    gh.delete_issue_comment.assert_called_once_with("o", "r", 7)
    gh.create_issue_comment.assert_not_called()
    gh.update_issue_comment.assert_not_called()


def test_reconcile_noop_when_clean_and_no_comment() -> None:
    gh = _gh()

    action = reconcile_comment(gh, CTX, Report(), BOT, MagicMock())

    assert action is CommentAction.NONE
    gh.create_issue_comment.assert_not_called()
    gh.update_issue_comment.assert_not_called()
    gh.delete_issue_comment.assert_not_called()
