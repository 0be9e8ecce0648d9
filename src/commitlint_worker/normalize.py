"""Strip ticket references such as ``ABC-123:`` from the start of a commit message."""
from __future__ import annotations

import re

# Uppercase project key, hyphen, number, one separator character, then any spacing.
TICKET_PREFIX_RE = re.compile(r"^[A-Z]+-[0-9]+.\s*")


def strip_ticket_prefix(message: str) -> str:
    return TICKET_PREFIX_RE.sub("", message, count=1)
