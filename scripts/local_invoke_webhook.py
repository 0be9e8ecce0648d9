#!/usr/bin/env python3
"""Send a signed pull_request delivery through the webhook receiver locally.

The webhook secret is taken from --secret instead of Secrets Manager. QUEUE_URL
and AWS credentials that can send to it are still required.
"""
import argparse
import base64
import hashlib
import hmac
import json
import pathlib
import sys
import uuid

sys.path.append("src")
import webhook_receiver.app as receiver  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("payload", nargs="?", default="scripts/sample_pull_request_opened.json")
    parser.add_argument("--action", help="override the payload action, e.g. synchronize")
    parser.add_argument("--secret", default="local-dev-secret")
    args = parser.parse_args()

    payload = json.loads(pathlib.Path(args.payload).read_text(encoding="utf-8"))
    if args.action:
        payload["action"] = args.action
    body = json.dumps(payload).encode("utf-8")

    secret = args.secret.encode("utf-8")
    receiver._cached_webhook_secret = secret
    signature = "sha256=" + hmac.new(secret, body, hashlib.sha256).hexdigest()

    event = {
        "headers": {
            "X-GitHub-Event": "pull_request",
            "X-GitHub-Delivery": f"local-{uuid.uuid4()}",
            "X-Hub-Signature-256": signature,
        },
        "isBase64Encoded": True,
        "body": base64.b64encode(body).decode("utf-8"),
    }

    out = receiver.lambda_handler(event, None)
    print(json.dumps(out, indent=2))
    return 0 if out["statusCode"] == 202 else 1


if __name__ == "__main__":
    raise SystemExit(main())
