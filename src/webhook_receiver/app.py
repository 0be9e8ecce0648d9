from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from typing import Any

import boto3
from botocore.client import BaseClient

from shared.constants import DEFAULT_REGION
from shared.logging import get_logger
from shared.schema import PullRequestEvent, parse_pull_request_event

logger = get_logger("webhook_receiver")

# Actions that change the PR's commits or bring it back for review.
ALLOWED_ACTIONS = {"opened", "synchronize", "reopened"}

_REGION = os.getenv("AWS_REGION", DEFAULT_REGION)
_sqs = boto3.client("sqs", region_name=_REGION)
_secrets = boto3.client("secretsmanager", region_name=_REGION)
_cached_webhook_secret: bytes | None = None


def _response(status_code: int, **body: Any) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


def _get_header(headers: dict[str, str], key: str) -> str | None:
    target = key.lower()
    for k, v in (headers or {}).items():
        if k.lower() == target:
            return v
    return None


def _load_webhook_secret(secrets_client: BaseClient | None = None) -> bytes:
    global _cached_webhook_secret
    if _cached_webhook_secret is not None:
        return _cached_webhook_secret

    client = secrets_client or _secrets
    response = client.get_secret_value(SecretId=os.environ["WEBHOOK_SECRET_ARN"])
    secret = response.get("SecretString")
    if not secret:
        raise ValueError("Webhook secret must exist in SecretString")
    _cached_webhook_secret = secret.encode("utf-8")
    return _cached_webhook_secret


def verify_signature(raw_body: bytes, signature_header: str, secret: bytes) -> bool:
    if not signature_header or not signature_header.startswith("sha256="):
        return False

    expected = "sha256=" + hmac.new(secret, raw_body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header)


def _extract_raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


def _repo_allowed(repo_full_name: str) -> bool:
    configured = os.getenv("GITHUB_ALLOWED_REPOS", "").strip()
    if not configured:
        return True
    allowed = {repo.strip() for repo in configured.split(",") if repo.strip()}
    return repo_full_name in allowed


def lambda_handler(event: dict[str, Any], _context: Any) -> dict[str, Any]:
    headers = event.get("headers") or {}
    github_event = _get_header(headers, "X-GitHub-Event")
    delivery_id = _get_header(headers, "X-GitHub-Delivery")
    signature = _get_header(headers, "X-Hub-Signature-256")

    if github_event != "pull_request":
        return _response(202, ignored="non_pull_request_event")

    if not delivery_id:
        return _response(400, error="missing_delivery_id")

    raw_body = _extract_raw_body(event)
    if not verify_signature(raw_body, signature or "", _load_webhook_secret()):
        logger.warning("signature_verification_failed", extra={"delivery_id": delivery_id})
        return _response(401, error="invalid_signature")

    payload = json.loads(raw_body.decode("utf-8"))
    if payload.get("action") not in ALLOWED_ACTIONS:
        return _response(202, ignored="action_not_supported")

    try:
        pr_event = parse_pull_request_event(payload)
    except ValueError:
        logger.warning("payload_validation_failed", extra={"delivery_id": delivery_id})
        return _response(400, error="missing_required_fields")

    if not _repo_allowed(pr_event.repo_full_name):
        logger.info(
            "repo_not_allowed",
            extra={
                "delivery_id": delivery_id,
                "repo": pr_event.repo_full_name,
                "pr_number": pr_event.pr_number,
                "sha": pr_event.head_sha,
            },
        )
        return _response(202, ignored="repo_not_allowed")

    return _enqueue_run(delivery_id, pr_event)


def _enqueue_run(delivery_id: str, pr_event: PullRequestEvent) -> dict[str, Any]:
    """Send one SQS message for the commitlint worker."""
    message = {
        "delivery_id": delivery_id,
        "repo_full_name": pr_event.repo_full_name,
        "pr_number": pr_event.pr_number,
        "head_sha": pr_event.head_sha,
        "installation_id": pr_event.installation_id,
    }

    _sqs.send_message(QueueUrl=os.environ["QUEUE_URL"], MessageBody=json.dumps(message))

    logger.info(
        "webhook_enqueued",
        extra={
            "delivery_id": delivery_id,
            "repo": pr_event.repo_full_name,
            "pr_number": pr_event.pr_number,
            "sha": pr_event.head_sha,
        },
    )
    return _response(202, status="accepted")
