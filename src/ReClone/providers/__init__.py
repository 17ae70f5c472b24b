"""Repository providers and the registry that maps names to them."""

from __future__ import annotations

from typing import Mapping

from ReClone.models import ProviderConfig, ProviderType
from ReClone.providers.base import (
    InvalidConfigurationError,
    MissingCredentialError,
    ProviderError,
    RemoteDecodeError,
    RemoteRequestError,
    RepoProvider,
)
from ReClone.providers.github import GitHubProvider, RateLimitError
from ReClone.providers.self_gitlab import GitLabProvider, SelfGitLabProvider

PROVIDERS: dict[ProviderType, type[RepoProvider]] = {
    ProviderType.GITLAB: GitLabProvider,
    ProviderType.SELF_GITLAB: SelfGitLabProvider,
    ProviderType.GITHUB: GitHubProvider,
}


class UnknownProviderError(ValueError):
    """Raised when a provider name has no registered implementation."""


def resolve_provider_type(kind: ProviderType | str) -> ProviderType:
    if isinstance(kind, ProviderType):
        return kind
    try:
        return ProviderType(kind.strip().lower())
    except ValueError:
        known = ", ".join(t.value for t in ProviderType)
        raise UnknownProviderError(
            f"Unknown provider: {kind!r} (expected one of: {known})"
        ) from None


def create_provider(
    kind: ProviderType | str,
    config: ProviderConfig,
    env: Mapping[str, str] | None = None,
) -> RepoProvider:
    """Build the provider registered for *kind*."""
    provider_cls = PROVIDERS[resolve_provider_type(kind)]
    return provider_cls(config, env=env)


__all__ = [
    "GitHubProvider",
    "GitLabProvider",
    "InvalidConfigurationError",
    "MissingCredentialError",
    "PROVIDERS",
    "ProviderError",
    "RateLimitError",
    "RemoteDecodeError",
    "RemoteRequestError",
    "RepoProvider",
    "SelfGitLabProvider",
    "UnknownProviderError",
    "create_provider",
    "resolve_provider_type",
]
