from __future__ import annotations

import base64
import hashlib
import hmac
import json
from unittest.mock import MagicMock

import pytest

import webhook_receiver.app as receiver

SECRET = b"topsecret"


def _payload(action: str = "opened", **overrides) -> dict:
    payload = {
        "action": action,
        "pull_request": {"number": 12, "head": {"sha": "abc123"}},
        "repository": {"full_name": "org/repo"},
        "installation": {"id": 321},
    }
    payload.update(overrides)
    return payload


def _event(payload: dict, github_event: str = "pull_request", secret: bytes = SECRET, encode: bool = False) -> dict:
    raw = json.dumps(payload).encode("utf-8")
    signature = "sha256=" + hmac.new(secret, raw, hashlib.sha256).hexdigest()
    return {
        "headers": {
            "x-github-event": github_event,
            "X-GitHub-Delivery": "delivery-1",
            "X-Hub-Signature-256": signature,
        },
        "isBase64Encoded": encode,
        "body": base64.b64encode(raw).decode("utf-8") if encode else raw.decode("utf-8"),
    }


@pytest.fixture
def sqs(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(receiver, "_sqs", client)
    monkeypatch.setattr(receiver, "_cached_webhook_secret", SECRET)
    monkeypatch.setenv("QUEUE_URL", "https://sqs.example/queue")
    monkeypatch.delenv("GITHUB_ALLOWED_REPOS", raising=False)
    return client


def _body(response: dict) -> dict:
    return json.loads(response["body"])


def test_pull_request_is_enqueued(sqs) -> None:
    out = receiver.lambda_handler(_event(_payload("synchronize")), None)

    assert out["statusCode"] == 202
    assert _body(out) == {"status": "accepted"}
    kwargs = sqs.send_message.call_args.kwargs
    assert kwargs["QueueUrl"] == "https://sqs.example/queue"
    assert json.loads(kwargs["MessageBody"]) == {
        "delivery_id": "delivery-1",
        "repo_full_name": "org/repo",
        "pr_number": 12,
        "head_sha": "abc123",
        "installation_id": 321,
    }


def test_base64_body_is_decoded(sqs) -> None:
    out = receiver.lambda_handler(_event(_payload(), encode=True), None)
    assert out["statusCode"] == 202
    sqs.send_message.assert_called_once()


def test_non_pull_request_events_are_ignored(sqs) -> None:
    out = receiver.lambda_handler(_event(_payload(), github_event="push"), None)

    assert _body(out) == {"ignored": "non_pull_request_event"}
    sqs.send_message.assert_not_called()


def test_missing_delivery_id(sqs) -> None:
    event = _event(_payload())
    del event["headers"]["X-GitHub-Delivery"]

    assert receiver.lambda_handler(event, None)["statusCode"] == 400


def test_bad_signature_is_rejected(sqs) -> None:
    out = receiver.lambda_handler(_event(_payload(), secret=b"wrong"), None)

    assert out["statusCode"] == 401
    sqs.send_message.assert_not_called()


@pytest.mark.parametrize("action", ["closed", "labeled", "edited"])
def test_unsupported_actions_are_ignored(sqs, action) -> None:
    out = receiver.lambda_handler(_event(_payload(action)), None)

    assert _body(out) == {"ignored": "action_not_supported"}
    sqs.send_message.assert_not_called()


def test_invalid_payload_is_rejected(sqs) -> None:
    out = receiver.lambda_handler(_event(_payload(pull_request={"number": 12})), None)

    assert out["statusCode"] == 400
    sqs.send_message.assert_not_called()


def test_repo_allow_list(sqs, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_ALLOWED_REPOS", "org/other, org/third")

    out = receiver.lambda_handler(_event(_payload()), None)

    assert _body(out) == {"ignored": "repo_not_allowed"}
    sqs.send_message.assert_not_called()


def test_webhook_secret_is_loaded_once(monkeypatch) -> None:
    monkeypatch.setattr(receiver, "_cached_webhook_secret", None)
    monkeypatch.setenv("WEBHOOK_SECRET_ARN", "arn:secret")
    secrets = MagicMock()
    secrets.get_secret_value.return_value = {"SecretString": "s3cr3t"}

    assert receiver._load_webhook_secret(secrets) == b"s3cr3t"
    assert receiver._load_webhook_secret(secrets) == b"s3cr3t"
    secrets.get_secret_value.assert_called_once_with(SecretId="arn:secret")
