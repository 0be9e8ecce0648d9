from __future__ import annotations

import enum
from typing import Optional

from commitlint_worker.render_markdown import render_report_comment
from shared.github_client import GitHubClient
from shared.schema import CommentRef, InvocationContext, Report


class CommentAction(str, enum.Enum):
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    NONE = "none"


def decide_comment_action(existing: Optional[CommentRef], has_problems: bool) -> CommentAction:
    """Keep at most one bot comment on the PR, present only while problems remain."""
    if has_problems:
        return CommentAction.EDIT if existing else CommentAction.CREATE
    return CommentAction.DELETE if existing else CommentAction.NONE


def reconcile_comment(
    gh: GitHubClient,
    ctx: InvocationContext,
    report: Report,
    bot_login: str,
    local_logger,
) -> CommentAction:
    existing = gh.find_bot_comment(ctx.owner, ctx.repo, ctx.pull_number, bot_login)
    action = decide_comment_action(existing, report.has_problems)

    if action is CommentAction.CREATE:
        created = gh.create_issue_comment(ctx.owner, ctx.repo, ctx.pull_number, render_report_comment(report.commits))
        local_logger.info("comment_created", extra={"extra": {"comment_id": created.get("id")}})
    elif action is CommentAction.EDIT:
        gh.update_issue_comment(ctx.owner, ctx.repo, existing.id, render_report_comment(report.commits))
        local_logger.info("comment_updated", extra={"extra": {"comment_id": existing.id}})
    elif action is CommentAction.DELETE:
        gh.delete_issue_comment(ctx.owner, ctx.repo, existing.id)
        local_logger.info("comment_deleted", extra={"extra": {"comment_id": existing.id}})

    return action
