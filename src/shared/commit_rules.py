"""Conventional-commit rules and the ``lint`` entrypoint used by the worker.

Each rule takes the parsed commit, the ``applicable`` flag (``always`` or
``never``) and the configured value, and returns ``(valid, message)``.
Messages follow commitlint's wording so reports read the same as the CLI.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from shared.commit_parser import ParsedCommit, parse_commit
from shared.schema import LintOutcome, LintProblem, RuleSetting

RuleFn = Callable[[ParsedCommit, str, Any], tuple[bool, str]]

IGNORED_RE = (
    re.compile(r"^Merge (branch|pull request|remote-tracking branch|tag)\b"),
    re.compile(r"^Merge .+ into .+"),
    re.compile(r"^Merged .+ (in|into) .+"),
    re.compile(r"^(Automatic merge|Auto-merged .+ into .+)"),
    re.compile(r"^(R|r)evert "),
    re.compile(r"^(fixup|squash|amend)! "),
)

_CASE_CHECKS: dict[str, Callable[[str], bool]] = {
    "lower-case": lambda s: s == s.lower(),
    "upper-case": lambda s: s == s.upper(),
    "camel-case": lambda s: re.fullmatch(r"[a-z][a-zA-Z0-9]*", s) is not None,
    "kebab-case": lambda s: re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", s) is not None,
    "pascal-case": lambda s: re.fullmatch(r"[A-Z][a-zA-Z0-9]*", s) is not None,
    "snake-case": lambda s: re.fullmatch(r"[a-z0-9]+(_[a-z0-9]+)*", s) is not None,
    "sentence-case": lambda s: s == s[:1].upper() + s[1:].lower(),
    "start-case": lambda s: s == " ".join(w[:1].upper() + w[1:].lower() for w in s.split(" ")),
}


def is_ignored(message: str) -> bool:
    return any(pattern.match(message) for pattern in IGNORED_RE)


def _negated(applicable: str) -> bool:
    return applicable == "never"


def _apply(result: bool, applicable: str) -> bool:
    return not result if _negated(applicable) else result


def _not(applicable: str) -> str:
    return "not " if _negated(applicable) else ""


def _empty_rule(part: str) -> RuleFn:
    def rule(parsed: ParsedCommit, applicable: str, _value: Any) -> tuple[bool, str]:
        empty = not getattr(parsed, part)
        return _apply(empty, applicable), f"{part} may {_not(applicable)}be empty"

    return rule


def _case_rule(part: str) -> RuleFn:
    def rule(parsed: ParsedCommit, applicable: str, value: Any) -> tuple[bool, str]:
        text = getattr(parsed, part)
        cases = list(value) if isinstance(value, (list, tuple)) else [value or "lower-case"]
        message = f"{part} must {_not(applicable)}be {', '.join(cases)}"
        if not text:
            return True, message
        unknown = [c for c in cases if c not in _CASE_CHECKS]
        if unknown:
            raise ValueError(f"Unknown case {unknown!r} for {part}-case")
        matches = any(_CASE_CHECKS[c](text) for c in cases)
        return _apply(matches, applicable), message

    return rule


def _type_enum(parsed: ParsedCommit, applicable: str, value: Any) -> tuple[bool, str]:
    allowed = list(value or [])
    message = f"type must {_not(applicable)}be one of [{', '.join(allowed)}]"
    if not parsed.type:
        return True, message
    return _apply(parsed.type in allowed, applicable), message


def _subject_full_stop(parsed: ParsedCommit, applicable: str, value: Any) -> tuple[bool, str]:
    stop = value if value is not None else "."
    message = f"subject may {_not(applicable)}end with full stop"
    if not parsed.subject:
        return True, message
    return _apply(parsed.subject.endswith(stop), applicable), message


def _header_max_length(parsed: ParsedCommit, _applicable: str, value: Any) -> tuple[bool, str]:
    length = len(parsed.header)
    return length <= int(value), f"header must not be longer than {value} characters, current length is {length}"


def _body_leading_blank(parsed: ParsedCommit, applicable: str, _value: Any) -> tuple[bool, str]:
    message = f"body must {_not(applicable)}have leading blank line"
    if not parsed.body:
        return True, message
    return _apply(not parsed.body_lines[0].strip(), applicable), message


def _footer_leading_blank(parsed: ParsedCommit, applicable: str, _value: Any) -> tuple[bool, str]:
    message = f"footer must {_not(applicable)}have leading blank line"
    if not parsed.footer:
        return True, message
    return _apply(parsed.footer_leading_blank, applicable), message


def _max_line_length(part: str) -> RuleFn:
    def rule(parsed: ParsedCommit, _applicable: str, value: Any) -> tuple[bool, str]:
        lines = getattr(parsed, f"{part}_lines")
        valid = all(len(line) <= int(value) for line in lines)
        return valid, f"{part}'s lines must not be longer than {value} characters"

    return rule


RULES: dict[str, RuleFn] = {
    "type-empty": _empty_rule("type"),
    "type-enum": _type_enum,
    "type-case": _case_rule("type"),
    "scope-case": _case_rule("scope"),
    "subject-empty": _empty_rule("subject"),
    "subject-full-stop": _subject_full_stop,
    "subject-case": _case_rule("subject"),
    "header-max-length": _header_max_length,
    "body-leading-blank": _body_leading_blank,
    "footer-leading-blank": _footer_leading_blank,
    "body-max-line-length": _max_line_length("body"),
    "footer-max-line-length": _max_line_length("footer"),
}


def _check_length(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected a non-negative integer length, got {value!r}")


def _check_cases(value: Any) -> None:
    if value is None:
        return
    cases = list(value) if isinstance(value, (list, tuple)) else [value]
    unknown = [c for c in cases if not isinstance(c, str) or c not in _CASE_CHECKS]
    if not cases or unknown:
        raise ValueError(f"unknown case {unknown or cases!r}, expected one of {', '.join(_CASE_CHECKS)}")


def _check_type_enum(value: Any) -> None:
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"expected a list of type names, got {value!r}")


def _check_full_stop(value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"expected a full stop string, got {value!r}")


_VALUE_CHECKS: dict[str, Callable[[Any], None]] = {
    "type-enum": _check_type_enum,
    "type-case": _check_cases,
    "scope-case": _check_cases,
    "subject-case": _check_cases,
    "subject-full-stop": _check_full_stop,
    "header-max-length": _check_length,
    "body-max-line-length": _check_length,
    "footer-max-line-length": _check_length,
}


def check_rule_value(name: str, setting: RuleSetting) -> None:
    """Raise ``ValueError`` if an enabled rule's value cannot be evaluated."""
    check = _VALUE_CHECKS.get(name)
    if check is not None and setting.enabled:
        check(setting.value)


def lint(message: str, rules: Mapping[str, RuleSetting]) -> LintOutcome:
    """Evaluate ``message`` against ``rules``; level 2 failures are errors, level 1 warnings."""
    invalid_names = [name for name in rules if name not in RULES]
    if invalid_names:
        raise ValueError(f"Found invalid rule names: {', '.join(invalid_names)}")

    if is_ignored(message):
        return LintOutcome(valid=True, input=message)

    parsed = parse_commit(message)
    errors: list[LintProblem] = []
    warnings: list[LintProblem] = []

    for name, setting in rules.items():
        if not setting.enabled:
            continue
        valid, text = RULES[name](parsed, setting.applicable, setting.value)
        if valid:
            continue
        problem = LintProblem(level=setting.level, valid=False, name=name, message=text)
        (errors if setting.level == 2 else warnings).append(problem)

    return LintOutcome(valid=not errors, errors=errors, warnings=warnings, input=message)
