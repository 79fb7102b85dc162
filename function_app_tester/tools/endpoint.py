"""
The ``test_endpoint`` tool: descriptor, argument validation and request shaping.

Nothing in here performs I/O. The server module turns an
:class:`EndpointRequest` into an httpx call and the response back into a
tool result.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
from mcp import types

from ..security import AuthConfig, auth_headers


TOOL_NAME = "test_endpoint"
ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = ("POST", "PUT")


def endpoint_tool(base_url: str) -> types.Tool:
    return types.Tool(
        name=TOOL_NAME,
        description=(
            "Test a Function App endpoint and get detailed response information. "
            f"The endpoint will be prepended to the base url which is: {base_url}"
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "method": {
                    "type": "string",
                    "enum": list(ALLOWED_METHODS),
                    "description": "HTTP method to use",
                },
                "endpoint": {
                    "type": "string",
                    "description": 'Endpoint path (e.g. "/users"). Will be appended to base URL.',
                },
                "body": {
                    "type": "object",
                    "description": "Optional request body for POST/PUT requests",
                },
                "headers": {
                    "type": "object",
                    "description": "Optional request headers",
                    "additionalProperties": {"type": "string"},
                },
            },
            "required": ["method", "endpoint"],
        },
    )


@dataclass(frozen=True)
class EndpointArgs:
    method: str
    endpoint: str
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ArgsOk:
    args: EndpointArgs


@dataclass(frozen=True)
class ArgsError:
    reason: str


ValidationResult = Union[ArgsOk, ArgsError]


def validate_test_endpoint_args(arguments: Optional[Mapping[str, Any]]) -> ValidationResult:
    if not isinstance(arguments, Mapping):
        return ArgsError("arguments must be an object")

    method = arguments.get("method")
    if method not in ALLOWED_METHODS:
        return ArgsError(f"method must be one of {', '.join(ALLOWED_METHODS)}")

    endpoint = arguments.get("endpoint")
    if not isinstance(endpoint, str):
        return ArgsError("endpoint must be a string")

    headers = arguments.get("headers")
    if headers is not None:
        if not isinstance(headers, Mapping):
            return ArgsError("headers must be an object")
        for name, value in headers.items():
            if not isinstance(name, str) or not isinstance(value, str):
                return ArgsError("headers must map strings to strings")

    return ArgsOk(
        EndpointArgs(
            method=method,
            endpoint=endpoint,
            body=arguments.get("body"),
            headers=dict(headers or {}),
        )
    )


def normalize_endpoint(endpoint: str) -> str:
    """``//users/`` -> ``/users``; an empty path becomes ``/``."""
    return "/" + endpoint.strip("/")


@dataclass
class EndpointRequest:
    method: str
    url: str
    headers: httpx.Headers
    body: Any = None
    has_body: bool = False

    def httpx_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
        }
        if self.has_body:
            if isinstance(self.body, (str, bytes)):
                kwargs["content"] = self.body
            else:
                kwargs["json"] = self.body
        return kwargs


def build_request(args: EndpointArgs, base_url: str, auth: AuthConfig) -> EndpointRequest:
    headers = httpx.Headers(args.headers)
    # auth wins over caller headers with the same (case-insensitive) name
    for name, value in auth_headers(auth).items():
        headers[name] = value

    has_body = args.method in BODY_METHODS and args.body is not None
    return EndpointRequest(
        method=args.method,
        url=f"{base_url}{normalize_endpoint(args.endpoint)}",
        headers=headers,
        body=args.body if has_body else None,
        has_body=has_body,
    )


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def _collect_headers(headers: httpx.Headers) -> Dict[str, Union[str, List[str]]]:
    """Repeated headers such as ``set-cookie`` keep every value as a list."""
    collected: Dict[str, List[str]] = {}
    for name, value in headers.multi_items():
        collected.setdefault(name, []).append(value)
    return {name: values if len(values) > 1 else values[0] for name, values in collected.items()}


def describe_response(url: str, response: httpx.Response) -> Dict[str, Any]:
    return {
        "url": url,
        "statusCode": response.status_code,
        "statusText": response.reason_phrase,
        "headers": _collect_headers(response.headers),
        "body": _decode_body(response),
    }


def format_response(url: str, response: httpx.Response) -> str:
    return json.dumps(describe_response(url, response), indent=2, ensure_ascii=False)
