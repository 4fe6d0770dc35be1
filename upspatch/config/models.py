from __future__ import annotations

import logging
from typing import Any, Dict, Optional, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


class PatcherConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    verify_patch_checksum: bool = True
    strict_output_verification: bool = False
    output_suffix: str = ".patched"
    overwrite: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None
    chunk_size: int = Field(default=1048576, gt=0)

    @field_validator("output_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("output_suffix must start with '.' and not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


def validate_config(payload: Dict[str, Any]) -> PatcherConfig:
    try:
        return cast(PatcherConfig, PatcherConfig.model_validate(payload or {}))
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field_name = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid configuration: {first.get('msg', e)}",
            field_name=field_name,
            details={"errors": len(e.errors())},
        ) from e
