from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .config import TesterConfig
from .observability import InMemoryMetrics
from .tools import (
    TOOL_NAME,
    ArgsError,
    build_request,
    format_response,
    endpoint_tool,
    validate_test_endpoint_args,
)


class FunctionAppTester:
    """
    MCP server exposing the ``test_endpoint`` tool.

    The configuration is frozen and the http client is owned by the caller,
    so every tool call is independent of the others.

    Unknown tools and bad arguments are protocol errors (``McpError``).
    Transport failures come back as tool results flagged ``isError``.
    Anything else propagates to the MCP runtime, which reports it as a
    failed request.
    """

    def __init__(
        self,
        config: TesterConfig,
        http_client: httpx.AsyncClient,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[InMemoryMetrics] = None,
    ) -> None:
        self.config = config
        self.http_client = http_client
        self.logger = logger or logging.getLogger("function_app_tester")
        self.metrics = metrics or InMemoryMetrics()
        self.server: Server = Server(config.server_name, version=config.server_version)
        self._setup_tool_handlers()

    def _setup_tool_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> List[types.Tool]:
            return self.list_tools()

        # Registered directly so McpError reaches the client as a protocol
        # error; the call_tool() decorator would turn it into a tool result.
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    def list_tools(self) -> List[types.Tool]:
        return [endpoint_tool(self.config.base_url)]

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(result)

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]]
    ) -> types.CallToolResult:
        if name != TOOL_NAME:
            raise McpError(
                types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}")
            )

        validation = validate_test_endpoint_args(arguments)
        if isinstance(validation, ArgsError):
            raise McpError(
                types.ErrorData(
                    code=types.INVALID_PARAMS,
                    message=f"Invalid test endpoint arguments: {validation.reason}",
                )
            )

        request = build_request(validation.args, self.config.base_url, self.config.auth)
        start = time.perf_counter()
        try:
            response = await self.http_client.request(**request.httpx_kwargs())
        except httpx.RequestError as exc:
            duration_ms = (time.perf_counter() - start) * 1000.0
            self.metrics.record(TOOL_NAME, duration_ms)
            self.logger.warning(
                f"Request failed: {exc}",
                extra={
                    "tool": TOOL_NAME,
                    "method": request.method,
                    "url": request.url,
                    "duration_ms": duration_ms,
                },
            )
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=f"Request failed: {exc}")],
                isError=True,
            )

        duration_ms = (time.perf_counter() - start) * 1000.0
        self.metrics.record(TOOL_NAME, duration_ms, response.status_code)
        self.logger.info(
            "Endpoint call completed",
            extra={
                "tool": TOOL_NAME,
                "method": request.method,
                "url": request.url,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=format_response(request.url, response))],
            isError=False,
        )

    async def run(self) -> None:
        async with stdio_server() as (read_stream, write_stream):
            self.logger.info("Function App Tester MCP server running on stdio")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def build_http_client(config: TesterConfig) -> httpx.AsyncClient:
    kwargs: Dict[str, Any] = {"follow_redirects": True}
    if config.timeout_seconds is not None:
        kwargs["timeout"] = httpx.Timeout(config.timeout_seconds)
    return httpx.AsyncClient(**kwargs)
