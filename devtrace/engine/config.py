"""
DevTrace Configuration — Load and validate devtrace.yaml at startup.

Usage:
    from devtrace.engine.config import load_config, get_config
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from devtrace.engine.errors import DevTraceConfigError

CONFIG_FILENAME = "devtrace.yaml"
CONFIG_ENV_VAR = "DEVTRACE_CONFIG"
DATA_FILE_ENV_VAR = "DEVTRACE_DATA_FILE"


# ---------------------------------------------------------------------------
# Pydantic models for devtrace.yaml
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    path: str = "data/tasks.json"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".devtrace/logs"
    file_logging: bool = True
    flush_interval_ms: int = Field(default=100, ge=1)
    flush_batch_size: int = Field(default=50, ge=1)
    max_queue_size: int = Field(default=10000, ge=1)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"logging level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return level


class DevTraceConfig(BaseModel):
    """Root model for devtrace.yaml."""
    name: str = "DevTrace"
    version: str = "1.0.0"
    environment: str = "dev"

    storage: StorageConfig = StorageConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v


DEFAULT_CONFIG_YAML = """\
devtrace:
  name: DevTrace
  environment: dev
storage:
  path: data/tasks.json
server:
  host: 127.0.0.1
  port: 3000
  cors_origins:
    - "*"
logging:
  level: INFO
  directory: .devtrace/logs
  file_logging: true
"""


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[DevTraceConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for devtrace.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def get_project_root() -> Path:
    """Return the project root directory."""
    return _find_project_root()


def _resolve_config_path(config_path: Optional[str]) -> Path:
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return _find_project_root() / CONFIG_FILENAME


def load_config(config_path: Optional[str] = None) -> DevTraceConfig:
    """
    Load and validate devtrace.yaml.

    Args:
        config_path: Explicit path to devtrace.yaml. If None, uses
            $DEVTRACE_CONFIG or auto-discovers from the CWD upwards.

    Returns:
        Validated DevTraceConfig instance.

    Raises:
        DevTraceConfigError: If the file is not valid YAML or fails validation.
    """
    global _config

    path = _resolve_config_path(config_path)
    raw: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DevTraceConfigError(f"Invalid YAML in {path}: {e}", path=str(path)) from e
        if not isinstance(raw, dict):
            raise DevTraceConfigError(
                f"{path} must contain a mapping at top level", path=str(path)
            )

    # devtrace.yaml nests identity under "devtrace:"; flatten it
    header = raw.get("devtrace", {}) or {}
    config_data = {
        "name": header.get("name", raw.get("name", "DevTrace")),
        "version": header.get("version", raw.get("version", "1.0.0")),
        "environment": header.get("environment", raw.get("environment", "dev")),
        "storage": raw.get("storage", {}) or {},
        "server": raw.get("server", {}) or {},
        "logging": raw.get("logging", {}) or {},
    }

    data_file = os.environ.get(DATA_FILE_ENV_VAR)
    if data_file:
        config_data["storage"] = {**config_data["storage"], "path": data_file}

    try:
        _config = DevTraceConfig(**config_data)
    except ValidationError as e:
        raise DevTraceConfigError(
            f"Invalid configuration in {path}",
            path=str(path),
            errors=[err["msg"] for err in e.errors()],
        ) from e
    return _config


def get_config() -> DevTraceConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    """Get the current environment."""
    return get_config().environment
