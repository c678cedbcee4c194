from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pod_lifecycle.config.schema import AgentConfig


class ConfigError(Exception):
    """Raised when config loading or validation fails."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class ConfigLoader:
    """Reads the agent YAML config and merges command-line overrides into it."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path

    def load(self, **overrides: Any) -> AgentConfig:
        """Load and validate the config file, then apply non-None overrides.

        A missing path (``None``) yields defaults plus overrides.
        """
        raw: dict[str, Any] = {}
        if self.path is not None:
            raw = self._read(self.path)

        raw.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return AgentConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(self.path or Path("<cli>"), f"Validation error: {e}") from e

    def _read(self, path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise ConfigError(path, "Config file does not exist")
        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(path, f"Invalid YAML: {e}") from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(path, "Expected a YAML mapping at top level")
        return raw
