"""Load the effective commitlint rule set.

Source order: explicit path, ``COMMITLINT_CONFIG_PATH``, bundled defaults.
A config file uses the ``.commitlintrc.json`` shape::

    {"rules": {"header-max-length": [1, "always", 72]}}

Rules in the file override the defaults by name; ``[0]`` disables a rule.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from shared.commit_rules import RULES, check_rule_value
from shared.schema import RuleSetting

# Mirrors @commitlint/config-conventional for the rules implemented here.
DEFAULT_RULES: dict[str, list[Any]] = {
    "body-leading-blank": [1, "always"],
    "body-max-line-length": [2, "always", 100],
    "footer-leading-blank": [1, "always"],
    "footer-max-line-length": [2, "always", 100],
    "header-max-length": [2, "always", 100],
    "subject-case": [2, "never", ["sentence-case", "start-case", "pascal-case", "upper-case"]],
    "subject-empty": [2, "never"],
    "subject-full-stop": [2, "never", "."],
    "type-case": [2, "always", "lower-case"],
    "type-empty": [2, "never"],
    "type-enum": [
        2,
        "always",
        ["build", "chore", "ci", "docs", "feat", "fix", "perf", "refactor", "revert", "style", "test"],
    ],
}


class RuleConfigError(ValueError):
    pass


def parse_rules(raw_rules: Any) -> dict[str, RuleSetting]:
    if not isinstance(raw_rules, dict):
        raise RuleConfigError("'rules' must be an object mapping rule names to settings")

    unknown = sorted(name for name in raw_rules if name not in RULES)
    if unknown:
        raise RuleConfigError(f"Found invalid rule names: {', '.join(unknown)}")

    parsed: dict[str, RuleSetting] = {}
    for name, raw in raw_rules.items():
        try:
            setting = RuleSetting.from_config(raw)
            check_rule_value(name, setting)
        except (ValidationError, ValueError) as exc:
            raise RuleConfigError(f"Invalid setting for rule {name}: {exc}") from exc
        parsed[name] = setting
    return parsed


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuleConfigError(f"Cannot read commitlint config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RuleConfigError(f"Commitlint config {path} is not valid JSON") from exc
    if not isinstance(data, dict):
        raise RuleConfigError(f"Commitlint config {path} must be a JSON object")
    return data


def load_rules(path: Optional[str] = None) -> dict[str, RuleSetting]:
    rules = parse_rules(DEFAULT_RULES)

    config_path = path or os.getenv("COMMITLINT_CONFIG_PATH", "").strip()
    if not config_path:
        return rules

    data = _read_config_file(Path(config_path))
    rules.update(parse_rules(data.get("rules", {})))
    return rules
