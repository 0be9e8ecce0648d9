#!/usr/bin/env python3
"""Print the X-Hub-Signature-256 header GitHub would send for a payload file."""
import hashlib
import hmac
import pathlib
import sys


def main() -> int:
    if len(sys.argv) != 3:
        print("Usage: generate_signature.py <webhook_secret> <payload_file>")
        return 1

    secret = sys.argv[1].encode("utf-8")
    body = pathlib.Path(sys.argv[2]).read_bytes()
    print("sha256=" + hmac.new(secret, body, hashlib.sha256).hexdigest())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
