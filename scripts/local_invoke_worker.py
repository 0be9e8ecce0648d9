#!/usr/bin/env python3
"""Run one commitlint worker record locally against the real GitHub API.

Needs GITHUB_APP_IDS_SECRET_ARN / GITHUB_APP_PRIVATE_KEY_SECRET_ARN and AWS
credentials that can read them.
"""
import argparse
import json
import sys

sys.path.append("src")
from commitlint_worker.app import lambda_handler  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--repo", default="example-org/example-repo")
    parser.add_argument("--pr", type=int, default=42)
    parser.add_argument("--sha", default="0123456789abcdef0123456789abcdef01234567")
    parser.add_argument("--installation-id", type=int, default=None)
    args = parser.parse_args()

    message = {
        "delivery_id": "local-delivery-123",
        "repo_full_name": args.repo,
        "pr_number": args.pr,
        "head_sha": args.sha,
        "installation_id": args.installation_id,
    }
    event = {"Records": [{"messageId": "local-message-1", "body": json.dumps(message)}]}

    out = lambda_handler(event, None)
    print(json.dumps(out, indent=2))
    return 1 if out["batchItemFailures"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
