"""Split a commit message into conventional-commit parts.

<type>(<scope>)[!]: <subject>
<blank line>
<body>
<blank line>
<footer>
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

HEADER_RE = re.compile(
    r"^(?P<type>\w*)"
    r"(?:\((?P<scope>.*)\))?"
    r"!?"
    r": "
    r"(?P<subject>.*)$"
)

# "Token: value", "Token #value" or BREAKING CHANGE notes start the footer.
FOOTER_RE = re.compile(r"^(?:BREAKING[ -]CHANGE|[\w-]+)(?::\s|\s#)")

SCISSORS = "# ------------------------ >8 ------------------------"


@dataclass
class ParsedCommit:
    raw: str
    header: str = ""
    type: Optional[str] = None
    scope: Optional[str] = None
    subject: Optional[str] = None
    body_lines: list[str] = field(default_factory=list)
    footer_lines: list[str] = field(default_factory=list)
    footer_leading_blank: bool = True

    @property
    def body(self) -> Optional[str]:
        text = "\n".join(self.body_lines).strip("\n")
        return text or None

    @property
    def footer(self) -> Optional[str]:
        text = "\n".join(self.footer_lines).strip("\n")
        return text or None


def _strip_comments(message: str) -> list[str]:
    lines: list[str] = []
    for line in message.splitlines():
        if line.strip() == SCISSORS:
            break
        if line.startswith("#"):
            continue
        lines.append(line)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def parse_commit(message: str) -> ParsedCommit:
    lines = _strip_comments(message)
    parsed = ParsedCommit(raw=message)
    if not lines:
        return parsed

    parsed.header = lines[0]
    match = HEADER_RE.match(parsed.header)
    if match:
        parsed.type = match.group("type") or None
        parsed.scope = match.group("scope") or None
        parsed.subject = match.group("subject") or None

    rest = lines[1:]
    footer_start = next((i for i, line in enumerate(rest) if i > 0 and FOOTER_RE.match(line)), None)
    if footer_start is None:
        parsed.body_lines = rest
    else:
        parsed.body_lines = rest[:footer_start]
        parsed.footer_lines = rest[footer_start:]
        parsed.footer_leading_blank = not rest[footer_start - 1].strip()
    return parsed
