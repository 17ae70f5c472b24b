"""GitLab REST API providers (gitlab.com and self-hosted instances)."""

from __future__ import annotations

from typing import Any

from ReClone.models import ProjectNode
from ReClone.providers.base import (
    RemoteDecodeError,
    RepoProvider,
    optional_str,
    required_bool,
)

DEFAULT_GITLAB_URL = "https://gitlab.com"


class SelfGitLabProvider(RepoProvider):
    """Provider for the projects of a group on a GitLab instance.

    Lists ``/api/v4/groups/{name}/projects`` page by page. GitLab has no
    cursor pagination for this endpoint, so an empty page marks the end.
    """

    DEFAULT_BASE_URL = DEFAULT_GITLAB_URL
    DEFAULT_ENV_VAR = "SELF_GITLAB_TOKEN"
    DISPLAY_NAME = "SelfGitlab"

    def token_help_url(self) -> str:
        return f"{self.base_url}/profile/personal_access_tokens"

    def _page_url(self, name: str) -> str:
        return f"{self.base_url}/api/v4/groups/{name}/projects"

    def _auth_headers(self, token: str) -> dict[str, str]:
        return {"PRIVATE-TOKEN": token}

    def _to_node(self, raw: Any) -> ProjectNode | None:
        if not isinstance(raw, dict):
            raise RemoteDecodeError(
                f"Expected a project object, got {type(raw).__name__}"
            )
        full_path = optional_str(raw, "path_with_namespace")
        ssh_url = optional_str(raw, "ssh_url_to_repo")
        http_url = optional_str(raw, "http_url_to_repo")
        archived = required_bool(raw, "archived")
        default_branch = optional_str(raw, "default_branch")

        # Require both transports so use_ssh never changes which entries survive
        if not (full_path and ssh_url and http_url):
            return None

        return ProjectNode(
            archived=archived,
            full_path=full_path,
            clone_url=ssh_url if self.config.use_ssh else http_url,
            default_branch=default_branch,
        )


class GitLabProvider(SelfGitLabProvider):
    """Provider for groups hosted on gitlab.com."""

    DEFAULT_ENV_VAR = "GITLAB_TOKEN"
    DISPLAY_NAME = "Gitlab"
