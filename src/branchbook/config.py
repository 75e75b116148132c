"""Book configuration loading.

Settings come from three layers, highest priority first:
1. Environment variables (``BRANCHBOOK_*``)
2. A ``branchbook.yaml`` file next to the story, or an explicit path
3. Built-in defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML

from branchbook.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)

CONFIG_FILENAME = "branchbook.yaml"

# Character budgets per physical page; artwork takes roughly half the page.
DEFAULT_ILLUSTRATED_LIMIT = 650
DEFAULT_PLAIN_LIMIT = 1500
DEFAULT_MIN_SPLIT_FRACTION = 0.5
DEFAULT_SHUFFLE_MIN_PAGES = 4
DEFAULT_LANGUAGE = "en"

_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "BRANCHBOOK_ILLUSTRATED_LIMIT": ("pagination", "illustrated_limit"),
    "BRANCHBOOK_PLAIN_LIMIT": ("pagination", "plain_limit"),
    "BRANCHBOOK_MIN_SPLIT_FRACTION": ("pagination", "min_split_fraction"),
    "BRANCHBOOK_SHUFFLE_MIN_PAGES": ("shuffle", "min_pages"),
    "BRANCHBOOK_LANGUAGE": ("", "language"),
}


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f" at {path}" if path else ""
        super().__init__(f"Invalid configuration{where}: {reason}")


@dataclass
class PaginationConfig:
    """Text splitting limits for printed pages.

    Attributes:
        illustrated_limit: Max characters on a page that carries artwork.
        plain_limit: Max characters on a page without artwork.
        min_split_fraction: A whitespace split must land at least this far
            into the page window, otherwise the text is cut hard.
    """

    illustrated_limit: int = DEFAULT_ILLUSTRATED_LIMIT
    plain_limit: int = DEFAULT_PLAIN_LIMIT
    min_split_fraction: float = DEFAULT_MIN_SPLIT_FRACTION

    def limit_for(self, has_illustration: bool) -> int:
        return self.illustrated_limit if has_illustration else self.plain_limit

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PaginationConfig:
        return cls(
            illustrated_limit=int(data.get("illustrated_limit", DEFAULT_ILLUSTRATED_LIMIT)),
            plain_limit=int(data.get("plain_limit", DEFAULT_PLAIN_LIMIT)),
            min_split_fraction=float(
                data.get("min_split_fraction", DEFAULT_MIN_SPLIT_FRACTION)
            ),
        )


@dataclass
class ShuffleConfig:
    """Settings for page shuffling.

    Attributes:
        min_pages: Shuffling is skipped for books with fewer pages than
            this, counting cover and back cover.
        seed: Optional seed for reproducible shuffles.
    """

    min_pages: int = DEFAULT_SHUFFLE_MIN_PAGES
    seed: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShuffleConfig:
        seed = data.get("seed")
        return cls(
            min_pages=int(data.get("min_pages", DEFAULT_SHUFFLE_MIN_PAGES)),
            seed=int(seed) if seed is not None else None,
        )


@dataclass
class BookConfig:
    """Configuration for laying out and exporting a book."""

    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    shuffle: ShuffleConfig = field(default_factory=ShuffleConfig)
    language: str = DEFAULT_LANGUAGE

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If any value is out of range.
        """
        if self.pagination.illustrated_limit < 1 or self.pagination.plain_limit < 1:
            raise ConfigError(None, "page limits must be positive")
        if not 0.0 <= self.pagination.min_split_fraction <= 1.0:
            raise ConfigError(None, "min_split_fraction must be between 0 and 1")
        if self.shuffle.min_pages < 0:
            raise ConfigError(None, "shuffle.min_pages must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BookConfig:
        """Create config from a dictionary.

        Args:
            data: Dictionary with optional ``pagination``, ``shuffle`` and
                ``language`` keys.

        Returns:
            BookConfig instance.
        """
        return cls(
            pagination=PaginationConfig.from_dict(dict(data.get("pagination") or {})),
            shuffle=ShuffleConfig.from_dict(dict(data.get("shuffle") or {})),
            language=str(data.get("language", DEFAULT_LANGUAGE)),
        )


def _read_yaml(config_path: Path) -> dict[str, Any]:
    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)
    except Exception as e:
        raise ConfigError(config_path, str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(config_path, "top level must be a mapping")
    return dict(data)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None:
            continue
        if section:
            merged.setdefault(section, {})[key] = value
        else:
            merged[key] = value
        log.debug("config_env_override", variable=env_name)
    return merged


def load_config(config_path: Path | None = None, search_dir: Path | None = None) -> BookConfig:
    """Load book configuration.

    Args:
        config_path: Explicit YAML file. Must exist when given.
        search_dir: Directory searched for ``branchbook.yaml`` when no
            explicit path is given. Missing files fall back to defaults.

    Returns:
        Validated BookConfig.

    Raises:
        ConfigError: If the file is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(config_path, "File not found")
        data = _read_yaml(config_path)
    elif search_dir is not None and (search_dir / CONFIG_FILENAME).exists():
        config_path = search_dir / CONFIG_FILENAME
        data = _read_yaml(config_path)

    try:
        config = BookConfig.from_dict(_apply_env_overrides(data))
    except (TypeError, ValueError) as e:
        raise ConfigError(config_path, str(e)) from e

    config.validate()
    log.debug("config_loaded", path=str(config_path) if config_path else None)
    return config
