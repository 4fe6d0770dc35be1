"""Config I/O utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import ConfigurationError
from .models import PatcherConfig, validate_config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UPSPATCH_CONFIG"

_ENV_OVERRIDES = {
    "UPSPATCH_VERIFY_PATCH_CHECKSUM": "verify_patch_checksum",
    "UPSPATCH_STRICT": "strict_output_verification",
    "UPSPATCH_OVERWRITE": "overwrite",
    "UPSPATCH_LOG_LEVEL": "log_level",
    "UPSPATCH_LOG_JSON": "log_json",
    "UPSPATCH_LOG_FILE": "log_file",
}


def get_config_path(config_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    if config_path:
        return Path(config_path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {e}", file_path=str(path)) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file: {e}", file_path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", file_path=str(path))
    return data


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for env_name, key in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or raw == "":
            continue
        overrides[key] = raw
    return overrides


def load_config(config_path: Optional[Union[str, Path]] = None) -> PatcherConfig:
    """Load configuration from a JSON/YAML file plus UPSPATCH_* environment overrides."""
    data: Dict[str, Any] = {}
    path = get_config_path(config_path)
    if path is not None:
        data = _read_config_file(path)
        logger.debug("Loaded config from %s", path)

    data.update(_env_overrides())
    return validate_config(data)


def save_config(config: PatcherConfig, config_path: Union[str, Path]) -> None:
    path = Path(config_path)
    payload = config.model_dump()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(payload, sort_keys=True), encoding="utf-8")
        else:
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write config file: {e}", file_path=str(path)) from e
