from __future__ import annotations

from .endpoint import (
    ALLOWED_METHODS,
    TOOL_NAME,
    ArgsError,
    ArgsOk,
    EndpointRequest,
    EndpointArgs,
    build_request,
    format_response,
    normalize_endpoint,
    endpoint_tool,
    validate_test_endpoint_args,
)

__all__ = [
    "ALLOWED_METHODS",
    "TOOL_NAME",
    "ArgsError",
    "ArgsOk",
    "EndpointRequest",
    "EndpointArgs",
    "build_request",
    "format_response",
    "normalize_endpoint",
    "endpoint_tool",
    "validate_test_endpoint_args",
]
