from __future__ import annotations

import json

import httpx
import pytest

from function_app_tester.security import AuthConfig
from function_app_tester.tools import (
    ArgsError,
    ArgsOk,
    EndpointArgs,
    build_request,
    format_response,
    normalize_endpoint,
    endpoint_tool,
    validate_test_endpoint_args,
)


BASE_URL = "http://localhost:7071/api"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("//users/", "/users"),
        ("users", "/users"),
        ("/users", "/users"),
        ("users///", "/users"),
        ("/users/42/orders/", "/users/42/orders"),
        ("", "/"),
        ("///", "/"),
    ],
)
def test_normalize_endpoint(raw: str, expected: str) -> None:
    assert normalize_endpoint(raw) == expected


def test_tool_descriptor_mentions_base_url() -> None:
    tool = endpoint_tool(BASE_URL)
    assert tool.name == "test_endpoint"
    assert BASE_URL in (tool.description or "")
    assert tool.inputSchema["required"] == ["method", "endpoint"]
    assert tool.inputSchema["properties"]["method"]["enum"] == ["GET", "POST", "PUT", "DELETE"]


def test_validate_accepts_minimal_arguments() -> None:
    result = validate_test_endpoint_args({"method": "GET", "endpoint": "/users"})
    assert isinstance(result, ArgsOk)
    assert result.args == EndpointArgs(method="GET", endpoint="/users")


def test_validate_keeps_body_and_headers() -> None:
    result = validate_test_endpoint_args({
        "method": "POST",
        "endpoint": "/users",
        "body": {"name": "ada"},
        "headers": {"X-Trace": "1"},
    })
    assert isinstance(result, ArgsOk)
    assert result.args.body == {"name": "ada"}
    assert result.args.headers == {"X-Trace": "1"}


@pytest.mark.parametrize(
    "arguments",
    [
        None,
        "GET /users",
        {"endpoint": "/users"},
        {"method": "PATCH", "endpoint": "/users"},
        {"method": "get", "endpoint": "/users"},
        {"method": "GET"},
        {"method": "GET", "endpoint": 42},
        {"method": "GET", "endpoint": "/users", "headers": "X-Trace: 1"},
        {"method": "GET", "endpoint": "/users", "headers": {"X-Count": 1}},
    ],
)
def test_validate_rejects_bad_arguments(arguments) -> None:
    result = validate_test_endpoint_args(arguments)
    assert isinstance(result, ArgsError)
    assert result.reason


@pytest.mark.parametrize("method", ["POST", "PUT"])
def test_body_attached_for_post_and_put(method: str) -> None:
    args = EndpointArgs(method=method, endpoint="/users", body={"name": "ada"})
    request = build_request(args, BASE_URL, AuthConfig())
    assert request.has_body is True
    assert request.httpx_kwargs()["json"] == {"name": "ada"}


@pytest.mark.parametrize("method", ["GET", "DELETE"])
def test_body_never_attached_for_get_and_delete(method: str) -> None:
    args = EndpointArgs(method=method, endpoint="/users", body={"name": "ada"})
    request = build_request(args, BASE_URL, AuthConfig())
    kwargs = request.httpx_kwargs()
    assert request.has_body is False
    assert "json" not in kwargs
    assert "content" not in kwargs


def test_missing_body_is_not_attached() -> None:
    request = build_request(EndpointArgs(method="POST", endpoint="/users"), BASE_URL, AuthConfig())
    assert request.has_body is False


def test_text_body_is_sent_raw() -> None:
    args = EndpointArgs(method="PUT", endpoint="/notes", body="plain text")
    assert build_request(args, BASE_URL, AuthConfig()).httpx_kwargs()["content"] == "plain text"


def test_url_is_base_plus_normalized_endpoint() -> None:
    request = build_request(EndpointArgs(method="GET", endpoint="//users/"), BASE_URL, AuthConfig())
    assert request.url == "http://localhost:7071/api/users"


def test_auth_header_overrides_caller_header_case_insensitively() -> None:
    args = EndpointArgs(
        method="GET",
        endpoint="/users",
        headers={"authorization": "Bearer from-caller", "X-Trace": "1"},
    )
    request = build_request(args, BASE_URL, AuthConfig(bearer_token="from-env"))
    assert request.headers.get_list("Authorization") == ["Bearer from-env"]
    assert request.headers["X-Trace"] == "1"


def test_format_response_serializes_json_body() -> None:
    response = httpx.Response(
        201,
        json={"id": 7},
        headers={"X-Request-Id": "abc"},
    )
    payload = json.loads(format_response(f"{BASE_URL}/users", response))
    assert payload["url"] == f"{BASE_URL}/users"
    assert payload["statusCode"] == 201
    assert payload["statusText"] == "Created"
    assert payload["headers"]["x-request-id"] == "abc"
    assert payload["body"] == {"id": 7}


def test_format_response_keeps_text_body() -> None:
    response = httpx.Response(500, text="boom")
    payload = json.loads(format_response(f"{BASE_URL}/fail", response))
    assert payload["statusCode"] == 500
    assert payload["statusText"] == "Internal Server Error"
    assert payload["body"] == "boom"


def test_format_response_empty_body() -> None:
    payload = json.loads(format_response(f"{BASE_URL}/gone", httpx.Response(204)))
    assert payload["body"] == ""


@pytest.mark.parametrize("body", [{}, [], 0, False, ""])
def test_falsy_body_is_still_sent(body) -> None:
    args = EndpointArgs(method="POST", endpoint="/flags", body=body)
    request = build_request(args, BASE_URL, AuthConfig())
    kwargs = request.httpx_kwargs()
    assert request.has_body is True
    if isinstance(body, str):
        assert kwargs["content"] == body
    else:
        assert kwargs["json"] == body


def test_format_response_keeps_repeated_headers() -> None:
    response = httpx.Response(
        200,
        headers=[
            ("Set-Cookie", "session=abc"),
            ("Set-Cookie", "theme=dark"),
            ("Content-Type", "text/plain"),
        ],
        text="ok",
    )
    payload = json.loads(format_response(f"{BASE_URL}/login", response))
    assert payload["headers"]["set-cookie"] == ["session=abc", "theme=dark"]
    assert payload["headers"]["content-type"] == "text/plain"
