from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class AuthConfig:
    basic_username: Optional[str] = None
    basic_password: Optional[str] = None
    bearer_token: Optional[str] = None
    apikey_header_name: Optional[str] = None
    apikey_value: Optional[str] = None

    @property
    def mode(self) -> str:
        """Active auth mode. Precedence: basic > bearer > apikey."""
        if self.basic_username and self.basic_password:
            return "basic"
        if self.bearer_token:
            return "bearer"
        if self.apikey_header_name and self.apikey_value:
            return "apikey"
        return "none"


def _env_value(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name)
    if value is None or value == "":
        return None
    return value


def load_auth_config(env: Mapping[str, str]) -> AuthConfig:
    return AuthConfig(
        basic_username=_env_value(env, "AUTH_BASIC_USERNAME"),
        basic_password=_env_value(env, "AUTH_BASIC_PASSWORD"),
        bearer_token=_env_value(env, "AUTH_BEARER"),
        apikey_header_name=_env_value(env, "AUTH_APIKEY_HEADER_NAME"),
        apikey_value=_env_value(env, "AUTH_APIKEY_VALUE"),
    )


def auth_headers(auth: AuthConfig) -> Dict[str, str]:
    """Headers for the active auth mode; empty when no mode is configured."""
    mode = auth.mode
    if mode == "basic":
        raw = f"{auth.basic_username}:{auth.basic_password}".encode("utf-8")
        return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
    if mode == "bearer":
        return {"Authorization": f"Bearer {auth.bearer_token}"}
    if mode == "apikey":
        return {str(auth.apikey_header_name): str(auth.apikey_value)}
    return {}
