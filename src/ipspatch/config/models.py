from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ConfigurationError

MAX_CHUNK_SIZE = 1024 * 1024

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class _BaseConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class PatcherConfig(_BaseConfigModel):
    chunk_size: int = Field(default=4096, gt=0, le=MAX_CHUNK_SIZE)
    log_level: LogLevel = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None


def validate_config(payload: Dict[str, Any], file_path: Optional[str] = None) -> PatcherConfig:
    try:
        return PatcherConfig.model_validate(payload or {})
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration: {exc.errors(include_url=False)}",
            file_path=file_path,
        ) from exc
