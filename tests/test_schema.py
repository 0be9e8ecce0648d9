import pytest

from shared.schema import (
    CommitRecord,
    InvocationContext,
    Report,
    RuleSetting,
    parse_pull_request_event,
)


def _payload(**overrides) -> dict:
    payload = {
        "action": "synchronize",
        "pull_request": {"number": 7, "head": {"sha": "abc123"}},
        "repository": {"full_name": "org/repo"},
        "installation": {"id": 99},
    }
    payload.update(overrides)
    return payload


def test_parse_pull_request_event() -> None:
    event = parse_pull_request_event(_payload())

    assert event.action == "synchronize"
    assert event.repo_full_name == "org/repo"
    assert event.pr_number == 7
    assert event.head_sha == "abc123"
    assert event.installation_id == 99


def test_parse_pull_request_event_without_installation() -> None:
    payload = _payload()
    del payload["installation"]
    assert parse_pull_request_event(payload).installation_id is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"pull_request": {"number": 7, "head": {}}},
        {"pull_request": {"head": {"sha": "abc"}}},
        {"repository": {"full_name": "no-slash"}},
        {"repository": {}},
    ],
)
def test_parse_pull_request_event_rejects_missing_fields(overrides) -> None:
    with pytest.raises(ValueError):
        parse_pull_request_event(_payload(**overrides))


def test_invocation_context_from_message() -> None:
    ctx = InvocationContext.from_message(
        {"repo_full_name": "org/repo", "pr_number": "7", "head_sha": "abc", "delivery_id": "d-1", "installation_id": 5}
    )

    assert (ctx.owner, ctx.repo, ctx.pull_number) == ("org", "repo", 7)
    assert ctx.repo_full_name == "org/repo"
    assert ctx.installation_id == 5


def test_invocation_context_is_immutable() -> None:
    ctx = InvocationContext(owner="o", repo="r", pull_number=1, head_sha="abc")
    with pytest.raises(Exception):
        ctx.head_sha = "other"


def test_commit_record_from_api() -> None:
    record = CommitRecord.from_api({"sha": "c1", "commit": {"message": "fix: bug\n\nbody"}})
    assert record.sha == "c1"
    assert record.message == "fix: bug\n\nbody"


def test_report_has_problems() -> None:
    assert Report().has_problems is False
    assert Report(warnings_count=1).has_problems is True


def test_rule_setting_from_config() -> None:
    setting = RuleSetting.from_config([2, "always", ["feat", "fix"]])
    assert setting.enabled
    assert setting.value == ["feat", "fix"]

    assert RuleSetting.from_config([0]).enabled is False


@pytest.mark.parametrize("raw", [[3, "always"], [2, "sometimes"], "error", []])
def test_rule_setting_rejects_bad_config(raw) -> None:
    with pytest.raises(ValueError):
        RuleSetting.from_config(raw)
