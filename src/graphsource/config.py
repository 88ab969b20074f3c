"""
Configuration loading and validation for sourcing runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .core.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "graphsource.yaml"


@dataclass
class SourcingConfig:
    """Configuration of one sourcing run."""
    url: Optional[str] = None
    languages: list[str] = field(default_factory=lambda: ["EN"])
    type_prefix: str = "Drupal"
    fragments_dir: Optional[str] = None
    debug_dir: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0
    concurrency: int = 1
    page_size: int = 100
    fragment_depth: int = 2
    filters: dict[str, Any] = field(default_factory=dict)  # remote type name -> `filter` argument

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourcingConfig":
        """Create config from dictionary."""
        languages = data.get("languages")
        if languages is None:
            languages = ["EN"]
        elif isinstance(languages, str):
            languages = [languages]

        return cls(
            url=data.get("url"),
            languages=[str(lang) for lang in languages],
            type_prefix=data.get("type_prefix", "Drupal"),
            fragments_dir=data.get("fragments_dir"),
            debug_dir=data.get("debug_dir"),
            headers=dict(data.get("headers") or {}),
            timeout=float(data.get("timeout", 30.0)),
            concurrency=int(data.get("concurrency", 1)),
            page_size=int(data.get("page_size", 100)),
            fragment_depth=int(data.get("fragment_depth", 2)),
            filters=dict(data.get("filters") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "url": self.url,
            "languages": list(self.languages),
            "type_prefix": self.type_prefix,
            "fragments_dir": self.fragments_dir,
            "debug_dir": self.debug_dir,
            "headers": dict(self.headers),
            "timeout": self.timeout,
            "concurrency": self.concurrency,
            "page_size": self.page_size,
            "fragment_depth": self.fragment_depth,
            "filters": dict(self.filters),
        }

    def validate(self) -> None:
        """
        Pre-flight checks, run before any network call.

        Raises:
            ConfigurationError: On a missing url or invalid values
        """
        if not self.url:
            raise ConfigurationError("Missing `url` option")
        if not self.languages:
            raise ConfigurationError("`languages` must list at least one language code")
        if self.concurrency < 1:
            raise ConfigurationError("`concurrency` must be at least 1")
        if self.page_size < 1:
            raise ConfigurationError("`page_size` must be at least 1")
        if self.fragment_depth < 0:
            raise ConfigurationError("`fragment_depth` must not be negative")

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> SourcingConfig | None:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    return SourcingConfig.from_dict(data)
