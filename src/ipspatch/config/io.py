"""Config I/O utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from .models import PatcherConfig, validate_config

logger = logging.getLogger(__name__)

ENV_PREFIX = "IPS_PATCHER_"
_TRUTHY = ("1", "true", "yes", "on")


def _parse_payload(path: Path, raw: str) -> Any:
    if path.suffix.lower() == ".json":
        return json.loads(raw)
    return yaml.safe_load(raw)


def load_config(config_path: Optional[Union[str, Path]] = None) -> PatcherConfig:
    """Load a PatcherConfig from a YAML or JSON file.

    Without a path the defaults are returned.
    """
    if config_path is None:
        return PatcherConfig()

    path = Path(config_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file: {exc}", file_path=str(path)) from exc

    try:
        data = _parse_payload(path, raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse config file: {exc}", file_path=str(path)) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", file_path=str(path))

    config = validate_config(data, file_path=str(path))
    logger.debug("Loaded config from %s", path)
    return config


def apply_env_overrides(
    config: PatcherConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> PatcherConfig:
    """Return a copy of ``config`` with IPS_PATCHER_* variables applied."""
    env = os.environ if environ is None else environ
    updates: Dict[str, Any] = {}

    chunk_size = env.get(f"{ENV_PREFIX}CHUNK_SIZE")
    if chunk_size is not None:
        try:
            updates["chunk_size"] = int(chunk_size)
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_PREFIX}CHUNK_SIZE must be an integer, got {chunk_size!r}") from exc

    log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        updates["log_level"] = log_level.strip().upper()

    log_json = env.get(f"{ENV_PREFIX}LOG_JSON")
    if log_json is not None:
        updates["log_json"] = log_json.strip().lower() in _TRUTHY

    if not updates:
        return config

    merged = config.model_dump()
    merged.update(updates)
    return validate_config(merged)
