from __future__ import annotations

from typing import Any, Callable, Iterator, Optional

import requests

from shared.constants import STATUS_CONTEXT
from shared.retry import NO_RETRY, RetryConfig, call_with_retry
from shared.schema import CommentRef

# Requests that are safe to replay after a transient failure.
_IDEMPOTENT_METHODS = {"GET", "PATCH", "DELETE"}


def _is_retryable_response(response: requests.Response) -> bool:
    return response.status_code == 429 or response.status_code >= 500


class GitHubClient:
    def __init__(
        self,
        token_provider: Callable[[], str],
        api_base: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()
        self._retry_config = retry_config or RetryConfig.from_env()

    def _request(self, method: str, path: str, idempotent: Optional[bool] = None, **kwargs) -> requests.Response:
        url = f"{self._api_base}{path}"
        base_headers = kwargs.pop("headers", {})
        if idempotent is None:
            idempotent = method in _IDEMPOTENT_METHODS

        def _do_request() -> requests.Response:
            headers = dict(base_headers)
            headers.update(
                {
                    "Authorization": f"token {self._token_provider()}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                }
            )
            return self._session.request(method, url, headers=headers, timeout=20, **kwargs)

        response = call_with_retry(
            operation_name=f"github_{method}_{path}",
            fn=_do_request,
            is_retryable_exception=lambda exc: isinstance(exc, (requests.ConnectionError, requests.Timeout)),
            is_retryable_result=_is_retryable_response,
            config=self._retry_config if idempotent else NO_RETRY,
        )
        response.raise_for_status()
        return response

    def _iter_pages(self, path: str, per_page: int = 100, params: Optional[dict] = None) -> Iterator[list[dict]]:
        """Yield one page at a time; the next page is requested only when the caller asks for it."""
        page = 1
        while True:
            query = dict(params or {})
            query.update({"per_page": per_page, "page": page})
            response = self._request("GET", path, params=query)
            page_data = response.json()
            if not page_data:
                return
            yield page_data
            if len(page_data) < per_page:
                return
            page += 1

    # -- statuses --------------------------------------------------------------

    def create_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        description: str,
        context: str = STATUS_CONTEXT,
        target_url: Optional[str] = None,
    ) -> dict:
        """Set the commit status for ``context``; a later call overwrites an earlier one."""
        payload: dict[str, Any] = {
            "state": state,
            "description": description,
            "context": context,
        }
        if target_url:
            payload["target_url"] = target_url

        response = self._request(
            "POST",
            f"/repos/{owner}/{repo}/statuses/{sha}",
            idempotent=True,
            json=payload,
        )
        return response.json()

    # -- pull request commits --------------------------------------------------

    def iter_pull_commit_pages(
        self, owner: str, repo: str, pull_number: int, per_page: int = 100,
    ) -> Iterator[list[dict]]:
        return self._iter_pages(f"/repos/{owner}/{repo}/pulls/{pull_number}/commits", per_page=per_page)

    # -- issue comments --------------------------------------------------------

    def iter_issue_comment_pages(
        self, owner: str, repo: str, issue_number: int, per_page: int = 100,
    ) -> Iterator[list[dict]]:
        return self._iter_pages(f"/repos/{owner}/{repo}/issues/{issue_number}/comments", per_page=per_page)

    def find_bot_comment(
        self, owner: str, repo: str, issue_number: int, bot_login: str,
    ) -> Optional[CommentRef]:
        """Return the first comment on the issue authored by ``bot_login``, if any."""
        for page in self.iter_issue_comment_pages(owner, repo, issue_number):
            for comment in page:
                author = (comment.get("user") or {}).get("login") or ""
                if author == bot_login:
                    return CommentRef(id=comment["id"], author=author, body=comment.get("body") or "")
        return None

    def create_issue_comment(
        self, owner: str, repo: str, issue_number: int, body: str,
    ) -> dict:
        """Post a comment on an issue or pull request."""
        response = self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )
        return response.json()

    def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict:
        response = self._request(
            "PATCH",
            f"/repos/{owner}/{repo}/issues/comments/{comment_id}",
            json={"body": body},
        )
        return response.json()

    def delete_issue_comment(self, owner: str, repo: str, comment_id: int) -> None:
        self._request("DELETE", f"/repos/{owner}/{repo}/issues/comments/{comment_id}")
