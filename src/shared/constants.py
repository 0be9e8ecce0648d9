"""Shared constants used across Lambda entrypoints."""

from __future__ import annotations

DEFAULT_REGION = "us-gov-west-1"

# Name of the status check attached to the PR head commit
STATUS_CONTEXT = "commitlint"

PENDING_DESCRIPTION = "Waiting for the status to be reported"

# Login GitHub shows for comments posted by the app installation
DEFAULT_BOT_USERNAME = "commitlint[bot]"

# GitHub rejects issue comments longer than this
MAX_COMMENT_LENGTH = 65_536
