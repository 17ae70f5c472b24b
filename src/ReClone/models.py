"""Data classes for ReClone."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class ProviderType(Enum):
    GITLAB = "gitlab"
    SELF_GITLAB = "self_gitlab"
    GITHUB = "github"


@dataclass(frozen=True)
class Repository:
    """A discovered repository, ready to hand to the clone executor."""

    destination_path: str
    clone_url: str
    default_branch: str | None = None
    extra: Mapping[str, Any] | None = None


@dataclass
class ProviderConfig:
    name: str
    local_path: str
    base_url: str | None = None  # provider's public instance when unset
    token_env_var: str | None = None  # provider-specific default when unset
    max_results: int = 20
    use_ssh: bool = True
    max_pages: int | None = None  # None means page until empty or capped

    def __post_init__(self):
        if self.max_results < 0:
            raise ValueError(f"max_results must be >= 0, got {self.max_results}")
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")


@dataclass
class ProjectNode:
    """One decoded remote entry. Lives only for the duration of a fetch."""

    archived: bool
    full_path: str
    clone_url: str
    default_branch: str | None = None


def join_destination(local_path: str, full_path: str) -> str:
    """Join a local prefix and a remote full path with a single separator."""
    return f"{local_path.rstrip('/')}/{full_path.lstrip('/')}"
