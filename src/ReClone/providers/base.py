"""Abstract base class for repository providers."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Mapping

import requests

from ReClone.models import ProjectNode, ProviderConfig, Repository, join_destination

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base class for errors raised while fetching repositories."""


class MissingCredentialError(ProviderError):
    """Raised when the credential environment variable is not set."""


class InvalidConfigurationError(ProviderError):
    """Raised when a provider configuration does not validate."""


class RemoteRequestError(ProviderError):
    """Raised for non-success responses and transport failures."""


class RemoteDecodeError(ProviderError):
    """Raised when a response body does not have the expected shape."""


class RepoProvider(ABC):
    """Base class for Git hosting service providers.

    Subclasses describe one forge's listing endpoint; the paginated
    fetch/filter/normalize loop is shared and lives here.
    """

    DEFAULT_BASE_URL: str = ""
    DEFAULT_ENV_VAR: str = ""
    DISPLAY_NAME: str = ""
    REQUEST_TIMEOUT = 30

    def __init__(
        self,
        config: ProviderConfig,
        env: Mapping[str, str] | None = None,
    ):
        self.config = config
        self.env = os.environ if env is None else env
        self.base_url = (config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.env_var = config.token_env_var or self.DEFAULT_ENV_VAR
        self.session = requests.Session()
        self.session.headers["User-Agent"] = "ReClone/1.0"

    def __str__(self) -> str:
        return (
            f"{self.DISPLAY_NAME} user/group {self.config.name.lower()} "
            f"at {self.base_url} in directory {self.config.local_path}, "
            f"using the token stored in {self.env_var}"
        )

    @abstractmethod
    def token_help_url(self) -> str:
        """Return the page where a personal access token can be created."""

    @abstractmethod
    def _page_url(self, name: str) -> str:
        """Return the listing endpoint for the (lowercased) namespace."""

    @abstractmethod
    def _auth_headers(self, token: str) -> dict[str, str]:
        """Return the headers that carry the credential."""

    @abstractmethod
    def _to_node(self, raw: Any) -> ProjectNode | None:
        """Decode one raw entry; None when it lacks a clone URL or path."""

    def _check_response(self, resp: requests.Response) -> None:
        """Hook for provider-specific response checks before status handling."""

    def validate_configuration(self) -> bool:
        """Check the credential variable and the namespace name.

        Problems are reported through the logger; nothing is raised and no
        request is made.
        """
        if self.env.get(self.env_var) is None:
            logger.error("Error: %s environment variable is not defined", self.env_var)
            logger.info("Create a personal access token here:")
            logger.info("%s", self.token_help_url())
            logger.info(
                "Set an environment variable called %s with the value", self.env_var
            )
            return False
        if self.config.name.endswith("/"):
            logger.error("Error: Ensure that names do not end in forward slashes")
            logger.info("You specified: %s", self.config.name)
            return False
        return True

    def ensure_valid(self) -> None:
        """Raise unless validate_configuration passes."""
        if not self.validate_configuration():
            if self.env.get(self.env_var) is None:
                raise MissingCredentialError(
                    f"Missing {self.env_var} environment variable"
                )
            raise InvalidConfigurationError(f"Invalid configuration for {self}")

    def _get_page(self, url: str, token: str, page: int) -> list:
        logger.debug("Requesting %s page %d", url, page)
        try:
            resp = self.session.get(
                url,
                params={"page": page},
                headers=self._auth_headers(token),
                timeout=self.REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise RemoteRequestError(f"Request to {url} failed: {exc}") from exc

        self._check_response(resp)

        if resp.status_code == 401:
            raise RemoteRequestError(
                f"Authentication failed. Check the token in {self.env_var}."
            )
        if resp.status_code == 403:
            raise RemoteRequestError("Access denied. The token may lack permissions.")
        if resp.status_code == 404:
            raise RemoteRequestError(
                f"Namespace not found: {self.config.name.lower()}"
            )
        if not resp.ok:
            raise RemoteRequestError(
                f"{url} returned HTTP {resp.status_code} for page {page}"
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteDecodeError(f"Response from {url} is not JSON") from exc
        if not isinstance(data, list):
            raise RemoteDecodeError(
                f"Expected a JSON array from {url}, got {type(data).__name__}"
            )
        return data

    def fetch_repositories(self) -> list[Repository]:
        """Return up to ``max_results`` non-archived repositories, in page order."""
        token = self.env.get(self.env_var)
        if token is None:
            raise MissingCredentialError(f"Missing {self.env_var} environment variable")

        cfg = self.config
        url = self._page_url(cfg.name.lower())
        nodes: list[ProjectNode] = []
        page = 1

        while True:
            data = self._get_page(url, token, page)
            if not data:
                break

            for raw in data:
                node = self._to_node(raw)
                if node is None or node.archived:
                    continue
                nodes.append(node)

            if len(nodes) >= cfg.max_results:
                break
            if cfg.max_pages is not None and page >= cfg.max_pages:
                logger.warning(
                    "Stopped after %d pages for %s without reaching %d results",
                    page,
                    cfg.name,
                    cfg.max_results,
                )
                break
            page += 1

        # A page may overshoot the cap before the check above runs.
        nodes = nodes[: cfg.max_results]
        # Archived entries must never reach the caller, whatever the loop does.
        nodes = [n for n in nodes if not n.archived]

        repositories = [
            Repository(
                destination_path=join_destination(cfg.local_path, n.full_path),
                clone_url=n.clone_url,
                default_branch=n.default_branch,
                extra=None,
            )
            for n in nodes
        ]
        logger.info("Found %d repositories for %s", len(repositories), self)
        return repositories


def optional_str(raw: Mapping[str, Any], key: str) -> str | None:
    """Read a nullable string field, raising RemoteDecodeError on a bad type."""
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise RemoteDecodeError(f"Field {key!r} must be a string or null")
    return value


def required_bool(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key)
    if not isinstance(value, bool):
        raise RemoteDecodeError(f"Field {key!r} must be a boolean")
    return value
