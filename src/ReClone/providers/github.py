"""GitHub REST API provider."""

from __future__ import annotations

import time
from typing import Any, Mapping

import requests

from ReClone.models import ProjectNode, ProviderConfig
from ReClone.providers.base import (
    RemoteDecodeError,
    RemoteRequestError,
    RepoProvider,
    optional_str,
    required_bool,
)


class RateLimitError(RemoteRequestError):
    """Raised when GitHub rate limit is exceeded."""

    def __init__(self, reset_at: int):
        self.reset_at = reset_at
        wait = max(0, reset_at - int(time.time()))
        super().__init__(
            f"GitHub API rate limit exceeded. Resets in {wait} seconds."
        )


class GitHubProvider(RepoProvider):
    """Provider for the repositories of a GitHub organization."""

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_ENV_VAR = "GITHUB_TOKEN"
    DISPLAY_NAME = "GitHub"

    def __init__(
        self,
        config: ProviderConfig,
        env: Mapping[str, str] | None = None,
    ):
        super().__init__(config, env)
        self.session.headers["Accept"] = "application/vnd.github+json"

    def token_help_url(self) -> str:
        return "https://github.com/settings/tokens"

    def _page_url(self, name: str) -> str:
        return f"{self.base_url}/orgs/{name}/repos"

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def _check_response(self, resp: requests.Response) -> None:
        # A successful response may use up the last request; only refusals count
        if resp.status_code not in (403, 429):
            return
        if _header_int(resp, "X-RateLimit-Remaining") == 0:
            raise RateLimitError(_header_int(resp, "X-RateLimit-Reset") or 0)

    def _to_node(self, raw: Any) -> ProjectNode | None:
        if not isinstance(raw, dict):
            raise RemoteDecodeError(
                f"Expected a repository object, got {type(raw).__name__}"
            )
        full_name = optional_str(raw, "full_name")
        ssh_url = optional_str(raw, "ssh_url")
        https_url = optional_str(raw, "clone_url")
        archived = required_bool(raw, "archived")

        if not (full_name and ssh_url and https_url):
            return None

        return ProjectNode(
            archived=archived,
            full_path=full_name,
            clone_url=ssh_url if self.config.use_ssh else https_url,
            default_branch=optional_str(raw, "default_branch"),
        )


def _header_int(resp: requests.Response, name: str) -> int | None:
    try:
        return int(resp.headers[name])
    except (KeyError, ValueError):
        return None
