import json
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

import boto3
import jwt
import requests
from botocore.client import BaseClient

from shared.retry import call_with_retry

# Refresh installation tokens this many seconds before GitHub expires them.
_TOKEN_EXPIRY_MARGIN_SECONDS = 300


class GitHubAppAuth:
    """Mint installation tokens for the commitlint GitHub App.

    The app id (and a default installation id) live in one Secrets Manager
    secret as JSON; the PEM private key lives in another. Tokens are cached
    per installation until shortly before they expire, so a warm Lambda
    container reuses them across runs.
    """

    def __init__(
        self,
        app_ids_secret_arn: str,
        private_key_secret_arn: str,
        api_base: str = "https://api.github.com",
        secrets_client: Optional[BaseClient] = None,
        http_session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._app_ids_secret_arn = app_ids_secret_arn
        self._private_key_secret_arn = private_key_secret_arn
        self._api_base = api_base.rstrip("/")
        self._secrets = secrets_client or boto3.client("secretsmanager")
        self._session = http_session or requests.Session()
        self._clock = clock
        self._app_ids: Optional[Tuple[str, Optional[str]]] = None
        self._private_key: Optional[str] = None
        self._tokens: dict[str, Tuple[str, float]] = {}

    def _read_secret_string(self, secret_arn: str) -> str:
        response = self._secrets.get_secret_value(SecretId=secret_arn)
        secret_string = response.get("SecretString")
        if not secret_string:
            raise ValueError(f"Secret {secret_arn} has no SecretString")
        return secret_string

    def _load_app_ids(self) -> Tuple[str, Optional[str]]:
        if self._app_ids is None:
            payload = json.loads(self._read_secret_string(self._app_ids_secret_arn))
            installation_id = payload.get("installation_id")
            self._app_ids = (str(payload["app_id"]), str(installation_id) if installation_id else None)
        return self._app_ids

    def _load_private_key(self) -> str:
        if self._private_key is None:
            self._private_key = self._read_secret_string(self._private_key_secret_arn)
        return self._private_key

    def create_app_jwt(self) -> str:
        app_id, _ = self._load_app_ids()
        now = int(self._clock())
        payload = {
            "iat": now - 60,
            "exp": now + 540,
            "iss": app_id,
        }
        token = jwt.encode(payload, self._load_private_key(), algorithm="RS256")
        return token if isinstance(token, str) else token.decode("utf-8")

    def _expiry_timestamp(self, data: dict) -> float:
        expires_at = data.get("expires_at")
        if not expires_at:
            return self._clock() + 3600
        return datetime.strptime(expires_at, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc).timestamp()

    def get_installation_token(self, installation_id_override: Optional[str] = None) -> str:
        _, default_installation_id = self._load_app_ids()
        installation_id = installation_id_override or default_installation_id
        if not installation_id:
            raise ValueError("No GitHub App installation id in the event or the app ids secret")

        cached = self._tokens.get(installation_id)
        if cached and cached[1] - _TOKEN_EXPIRY_MARGIN_SECONDS > self._clock():
            return cached[0]

        jwt_token = self.create_app_jwt()
        url = f"{self._api_base}/app/installations/{installation_id}/access_tokens"

        def _request() -> requests.Response:
            return self._session.post(
                url,
                headers={
                    "Authorization": f"Bearer {jwt_token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=15,
            )

        response = call_with_retry(
            "github_installation_token",
            _request,
            is_retryable_exception=lambda exc: isinstance(exc, requests.RequestException),
            is_retryable_result=lambda r: r.status_code == 429 or r.status_code >= 500,
        )
        response.raise_for_status()
        data = response.json()
        token = data.get("token")
        if not token:
            raise ValueError("GitHub installation token missing from response")
        self._tokens[installation_id] = (token, self._expiry_timestamp(data))
        return token
