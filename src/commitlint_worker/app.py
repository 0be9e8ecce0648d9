from __future__ import annotations

import json
import os
import time
from typing import Any, Callable, Mapping, Optional

import boto3

from commitlint_worker.comments import reconcile_comment
from commitlint_worker.report import Linter, fold_page, status_description, status_state
from shared.commit_rules import lint
from shared.constants import DEFAULT_BOT_USERNAME, DEFAULT_REGION, PENDING_DESCRIPTION
from shared.github_app_auth import GitHubAppAuth
from shared.github_client import GitHubClient
from shared.logging import get_logger
from shared.rule_config import load_rules
from shared.schema import CommitRecord, InvocationContext, Report, RuleSetting

logger = get_logger("commitlint_worker")

_REGION = os.getenv("AWS_REGION", DEFAULT_REGION)
_cloudwatch = boto3.client("cloudwatch", region_name=_REGION)
_secrets = boto3.client("secretsmanager", region_name=_REGION)

RulesLoader = Callable[[], Mapping[str, RuleSetting]]


def _emit_metric(metric_name: str, value: float, unit: str = "Count") -> None:
    namespace = os.getenv("METRICS_NAMESPACE", "CommitlintBot")
    try:
        _cloudwatch.put_metric_data(
            Namespace=namespace,
            MetricData=[
                {
                    "MetricName": metric_name,
                    "Unit": unit,
                    "Value": value,
                }
            ],
        )
    except Exception:  # noqa: BLE001
        logger.warning(
            "metric_emit_failed",
            extra={"extra": {"metric_name": metric_name, "namespace": namespace}},
        )


def publish_pending(gh: GitHubClient, ctx: InvocationContext) -> None:
    gh.create_status(ctx.owner, ctx.repo, ctx.head_sha, state="pending", description=PENDING_DESCRIPTION)


def publish_final(gh: GitHubClient, ctx: InvocationContext, report: Report) -> None:
    gh.create_status(
        ctx.owner,
        ctx.repo,
        ctx.head_sha,
        state=status_state(report),
        description=status_description(report),
    )


def run_commitlint(
    gh: GitHubClient,
    ctx: InvocationContext,
    rules_loader: RulesLoader = load_rules,
    linter: Linter = lint,
    bot_login: str = DEFAULT_BOT_USERNAME,
    local_logger: Optional[Any] = None,
) -> Report:
    """Lint every commit on the pull request and publish the status and comment.

    Steps run strictly in order and any exception aborts the run. A failure
    after the pending status is published leaves that status in place.
    """
    local_logger = local_logger or logger

    publish_pending(gh, ctx)
    local_logger.info("status_pending_published")

    rules = rules_loader()

    report = Report()
    commits_linted = 0
    for page in gh.iter_pull_commit_pages(ctx.owner, ctx.repo, ctx.pull_number):
        report = fold_page(report, (CommitRecord.from_api(item) for item in page), rules, linter)
        commits_linted += len(page)
        local_logger.info(
            "commit_page_linted",
            extra={"extra": {"page_size": len(page), "errors": report.errors_count, "warnings": report.warnings_count}},
        )

    publish_final(gh, ctx, report)
    local_logger.info(
        "status_final_published",
        extra={"extra": {"state": status_state(report), "commits": commits_linted}},
    )
    _emit_metric("commits_linted", commits_linted)

    reconcile_comment(gh, ctx, report, bot_login, local_logger)
    return report


def _github_client(ctx: InvocationContext) -> GitHubClient:
    api_base = os.getenv("GITHUB_API_BASE", "https://api.github.com")
    auth = GitHubAppAuth(
        app_ids_secret_arn=os.environ["GITHUB_APP_IDS_SECRET_ARN"],
        private_key_secret_arn=os.environ["GITHUB_APP_PRIVATE_KEY_SECRET_ARN"],
        api_base=api_base,
        secrets_client=_secrets,
    )
    token = auth.get_installation_token(
        installation_id_override=str(ctx.installation_id) if ctx.installation_id else None
    )
    return GitHubClient(token_provider=lambda: token, api_base=api_base)


def _process_record(record: dict[str, Any]) -> None:
    started = time.time()
    ctx = InvocationContext.from_message(json.loads(record["body"]))

    local_logger = get_logger(
        "commitlint_worker",
        delivery_id=ctx.delivery_id,
        repo=ctx.repo_full_name,
        pr_number=ctx.pull_number,
        sha=ctx.head_sha,
        correlation_id=f"{ctx.delivery_id}:{ctx.repo_full_name}:{ctx.pull_number}:{ctx.head_sha}",
    )

    gh = _github_client(ctx)
    report = run_commitlint(
        gh,
        ctx,
        bot_login=os.getenv("BOT_USERNAME") or DEFAULT_BOT_USERNAME,
        local_logger=local_logger,
    )

    duration_ms = (time.time() - started) * 1000
    local_logger.info("run_completed", extra={"extra": {"valid": report.valid, "duration_ms": round(duration_ms)}})
    _emit_metric("runs_success", 1)
    _emit_metric("duration_ms", duration_ms, unit="Milliseconds")


def lambda_handler(event: dict[str, Any], _context: Any) -> dict[str, Any]:
    failures: list[dict[str, str]] = []

    for record in event.get("Records", []):
        message_id = record.get("messageId", "unknown")
        try:
            _process_record(record)
        except Exception:  # noqa: BLE001
            logger.exception("record_processing_failed", extra={"message_id": message_id})
            _emit_metric("runs_failed", 1)
            failures.append({"itemIdentifier": message_id})

    return {"batchItemFailures": failures}
