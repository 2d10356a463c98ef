"""IPS Patcher - configuration package."""

from .io import apply_env_overrides, load_config
from .models import PatcherConfig, validate_config

__all__ = [
    "PatcherConfig",
    "apply_env_overrides",
    "load_config",
    "validate_config",
]
