import json
import logging

from shared.logging import ContextAdapter, JsonFormatter


def _format(logger_name: str, msg: str, **extra) -> dict:
    record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(JsonFormatter().format(record))


def test_json_formatter_includes_run_context() -> None:
    payload = _format("commitlint_worker", "status_final_published", repo="org/repo", pr_number=3, sha="abc")

    assert payload["message"] == "status_final_published"
    assert payload["level"] == "INFO"
    assert payload["repo"] == "org/repo"
    assert payload["pr_number"] == 3
    assert payload["sha"] == "abc"
    assert "delivery_id" not in payload


def test_json_formatter_merges_nested_extra() -> None:
    payload = _format("commitlint_worker", "commit_page_linted", extra={"page_size": 2})
    assert payload["page_size"] == 2


def test_context_adapter_merges_context_with_call_extra() -> None:
    adapter = ContextAdapter(logging.getLogger("test"), {"delivery_id": "d-1"})

    _, kwargs = adapter.process("msg", {"extra": {"extra": {"errors": 1}}})

    assert kwargs["extra"] == {"delivery_id": "d-1", "extra": {"errors": 1}}
