from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


StatusState = Literal["pending", "success", "failure"]
RuleLevel = Literal[0, 1, 2]
RuleApplicable = Literal["always", "never"]


class PullRequestEvent(BaseModel):
    """The subset of a ``pull_request`` webhook payload the bot relies on."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    action: str
    repo_full_name: str
    pr_number: int = Field(gt=0)
    head_sha: str
    installation_id: Optional[int] = None

    @field_validator("repo_full_name")
    @classmethod
    def validate_repo_full_name(cls, value: str) -> str:
        owner, _, repo = value.partition("/")
        if not owner or not repo:
            raise ValueError("repo_full_name must look like owner/repo")
        return value

    @field_validator("head_sha")
    @classmethod
    def validate_head_sha(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("head_sha cannot be empty")
        return value


def parse_pull_request_event(payload: dict[str, Any]) -> PullRequestEvent:
    pull_request = payload.get("pull_request") or {}
    repository = payload.get("repository") or {}
    installation = payload.get("installation") or {}

    try:
        return PullRequestEvent(
            action=payload.get("action"),
            repo_full_name=repository.get("full_name"),
            pr_number=pull_request.get("number"),
            head_sha=(pull_request.get("head") or {}).get("sha"),
            installation_id=installation.get("id"),
        )
    except ValidationError as exc:
        raise ValueError(f"Webhook payload failed validation: {exc}") from exc


class InvocationContext(BaseModel):
    """Identity of one pull request run. Immutable for the run."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    pull_number: int
    head_sha: str
    delivery_id: str = "unknown"
    installation_id: Optional[int] = None

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_message(cls, message: dict[str, Any]) -> "InvocationContext":
        owner, _, repo = str(message["repo_full_name"]).partition("/")
        installation_id = message.get("installation_id")
        return cls(
            owner=owner,
            repo=repo,
            pull_number=int(message["pr_number"]),
            head_sha=message["head_sha"],
            delivery_id=message.get("delivery_id") or "unknown",
            installation_id=int(installation_id) if installation_id else None,
        )


class CommitRecord(BaseModel):
    sha: str
    message: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CommitRecord":
        return cls(sha=data["sha"], message=(data.get("commit") or {}).get("message") or "")


class LintProblem(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: RuleLevel
    valid: bool = False
    name: str
    message: str


class LintOutcome(BaseModel):
    valid: bool
    errors: list[LintProblem] = Field(default_factory=list)
    warnings: list[LintProblem] = Field(default_factory=list)
    input: str = ""


class CommitReport(BaseModel):
    sha: str
    errors: list[LintProblem] = Field(default_factory=list)
    warnings: list[LintProblem] = Field(default_factory=list)


class Report(BaseModel):
    """Aggregate over every commit linted so far."""

    model_config = ConfigDict(frozen=True)

    valid: bool = True
    commits: tuple[CommitReport, ...] = ()
    errors_count: int = 0
    warnings_count: int = 0

    @property
    def has_problems(self) -> bool:
        return self.errors_count > 0 or self.warnings_count > 0


class CommentRef(BaseModel):
    id: int
    author: str = ""
    body: str = ""


class RuleSetting(BaseModel):
    """A commitlint-style ``[level, applicable, value]`` triple."""

    model_config = ConfigDict(frozen=True)

    level: RuleLevel
    applicable: RuleApplicable = "always"
    value: Any = None

    @classmethod
    def from_config(cls, raw: Any) -> "RuleSetting":
        if isinstance(raw, RuleSetting):
            return raw
        if not isinstance(raw, (list, tuple)) or not 1 <= len(raw) <= 3:
            raise ValueError("rule setting must be a [level, applicable, value] list")
        fields = dict(zip(("level", "applicable", "value"), raw))
        return cls.model_validate(fields)

    @property
    def enabled(self) -> bool:
        return self.level > 0
