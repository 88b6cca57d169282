"""
YAML configuration for the layout scripts, with dotted-key overrides.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional
import copy
import logging

import yaml

logger = logging.getLogger(__name__)


def merge_config(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``overrides`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value replaces the base
    value outright. Neither input is modified.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def parse_override(expression: str) -> Dict[str, Any]:
    """
    Turn ``"relaxation.iterations=50"`` into ``{"relaxation": {"iterations": 50}}``.

    The value is read as YAML, so numbers, booleans and ``null`` keep their type.

    Raises:
        ValueError: If the expression has no ``=`` or an empty key
    """
    key, sep, raw = expression.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Override must look like section.key=value, got {expression!r}")
    value: Any = yaml.safe_load(raw) if raw.strip() else None
    for part in reversed(key.split(".")):
        value = {part: value}
    return value


class ConfigLoader:
    """Read ``<name>.yaml`` files from one config directory."""

    def __init__(self, config_dir: Path):
        self.config_dir = Path(config_dir)
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Config directory not found: {config_dir}")

    def path_for(self, config_name: str) -> Path:
        return self.config_dir / f"{config_name}.yaml"

    def load(self, config_name: str, overrides: Iterable[str] = ()) -> Dict[str, Any]:
        """
        Load one config file and apply ``section.key=value`` overrides.

        Args:
            config_name: File stem, e.g. ``"layout"``
            overrides: Override expressions applied in order

        Returns:
            Configuration mapping (empty for an empty file)

        Raises:
            FileNotFoundError: If the file doesn't exist
            yaml.YAMLError: If the file is not valid YAML
            ValueError: If an override is malformed
        """
        config_path = self.path_for(config_name)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}

        for expression in overrides:
            config = merge_config(config, parse_override(expression))
            logger.debug(f"Config override applied to {config_name}: {expression}")
        return config

    def load_all(self) -> Dict[str, Dict[str, Any]]:
        """Every ``*.yaml`` in the directory, keyed by file stem."""
        return {path.stem: self.load(path.stem) for path in sorted(self.config_dir.glob("*.yaml"))}


def load_config(
    config_dir: Path, config_name: str, overrides: Optional[Iterable[str]] = None
) -> Dict[str, Any]:
    """Shortcut for ``ConfigLoader(config_dir).load(config_name, overrides)``."""
    return ConfigLoader(config_dir).load(config_name, overrides or ())
