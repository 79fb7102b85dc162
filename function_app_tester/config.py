from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .security import AuthConfig, load_auth_config


DEFAULT_BASE_URL = "http://localhost:7071/api"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "server.yaml"


@dataclass(frozen=True)
class TesterConfig:
    base_url: str = DEFAULT_BASE_URL
    auth: AuthConfig = field(default_factory=AuthConfig)
    server_name: str = "function-app-tester"
    server_version: str = "0.1.0"
    log_level: str = "INFO"
    timeout_seconds: Optional[float] = None


def load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Function app tester config not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def _read_settings_file(env: Mapping[str, str]) -> Dict[str, Any]:
    explicit = env.get("FUNCTION_APP_TESTER_CONFIG", "").strip()
    if explicit:
        return load_config(Path(explicit))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return {}


def build_config(
    env: Optional[Mapping[str, str]] = None,
    file_config: Optional[Dict[str, Any]] = None,
) -> TesterConfig:
    """
    Build the process-wide configuration.

    Environment variables win over the YAML ``server:`` section, which wins
    over built-in defaults. The result is frozen; it is built once at startup
    and handed to the server.
    """
    if env is None:
        env = os.environ
    if file_config is None:
        file_config = _read_settings_file(env)

    server_cfg = file_config.get("server", {}) or {}

    base_url = (
        env.get("FUNCTION_APP_BASE_URL")
        or server_cfg.get("base_url")
        or DEFAULT_BASE_URL
    )
    timeout = server_cfg.get("timeout_seconds")
    log_level = env.get("LOG_LEVEL") or server_cfg.get("log_level", "INFO")

    return TesterConfig(
        base_url=str(base_url).rstrip("/"),
        auth=load_auth_config(env),
        server_name=str(server_cfg.get("name", "function-app-tester")),
        server_version=str(server_cfg.get("version", "0.1.0")),
        log_level=str(log_level).upper(),
        timeout_seconds=float(timeout) if timeout is not None else None,
    )
