"""Provider configuration parsing and TOML loading."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Mapping

from ReClone.models import ProviderConfig, ProviderType
from ReClone.providers import UnknownProviderError, resolve_provider_type

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a provider configuration cannot be parsed."""


_KNOWN_KEYS = frozenset(
    {"provider", "name", "url", "path", "env_var", "max", "use_ssh", "max_pages"}
)


def parse_provider_config(
    data: Mapping[str, Any],
) -> tuple[ProviderType, ProviderConfig]:
    """Build a ProviderConfig from one configuration table.

    Recognised keys (case-insensitive):
      - provider: gitlab | self_gitlab | github (default self_gitlab)
      - name: group or namespace, may contain slashes (required)
      - path: local directory to clone into (required)
      - url: forge instance URL
      - env_var: environment variable holding the token
      - max: maximum number of repositories (default 20)
      - use_ssh: clone over SSH rather than HTTP (default true)
      - max_pages: stop after this many pages
    """
    data = {str(k).lower(): v for k, v in data.items()}

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    try:
        kind = resolve_provider_type(data.get("provider", "self_gitlab"))
    except (UnknownProviderError, AttributeError) as exc:
        raise ConfigError(str(exc)) from exc

    name = _require_str(data, "name")
    path = _require_str(data, "path")
    url = _optional_str(data, "url")
    env_var = _optional_str(data, "env_var")

    max_results = data.get("max", 20)
    if not _is_int(max_results) or max_results < 0:
        raise ConfigError(f"'max' must be a non-negative integer, got {max_results!r}")

    use_ssh = data.get("use_ssh", True)
    if not isinstance(use_ssh, bool):
        raise ConfigError(f"'use_ssh' must be true or false, got {use_ssh!r}")

    max_pages = data.get("max_pages")
    if max_pages is not None and (not _is_int(max_pages) or max_pages < 1):
        raise ConfigError(f"'max_pages' must be a positive integer, got {max_pages!r}")

    return kind, ProviderConfig(
        name=name,
        local_path=path,
        base_url=url,
        token_env_var=env_var,
        max_results=max_results,
        use_ssh=use_ssh,
        max_pages=max_pages,
    )


def load_config(path: str | Path) -> list[tuple[ProviderType, ProviderConfig]]:
    """Read every ``[[provider]]`` table from a TOML file."""
    path = Path(path)
    try:
        with path.open("rb") as fh:
            document = tomllib.load(fh)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    tables = document.get("provider", [])
    if not isinstance(tables, list):
        raise ConfigError(f"{path}: 'provider' must be an array of tables")

    configs = []
    for index, table in enumerate(tables):
        if not isinstance(table, dict):
            raise ConfigError(f"{path}: provider #{index} is not a table")
        try:
            configs.append(parse_provider_config(table))
        except ConfigError as exc:
            raise ConfigError(f"{path}: provider #{index}: {exc}") from exc
    return configs


def _is_int(value: Any) -> bool:
    # bool is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' is required and must be a non-empty string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string, got {value!r}")
    return value
