from __future__ import annotations

import asyncio
import json
import os
import sys
from typing import Any, Dict

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError


SERVER = StdioServerParameters(
    command=sys.executable,
    args=["-m", "function_app_tester.main"],
    env=dict(os.environ),
)


async def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/call_tool.py '<json-args>' [tool_name]")
        print('Example: python scripts/call_tool.py \'{"method": "GET", "endpoint": "/users"}\'')
        raise SystemExit(1)

    raw_args = sys.argv[1]
    tool_name = sys.argv[2] if len(sys.argv) > 2 else "test_endpoint"

    try:
        params: Dict[str, Any] = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        print("Failed to parse JSON arguments")
        print(repr(exc))
        raise SystemExit(1)

    async with stdio_client(SERVER) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            try:
                result = await session.call_tool(tool_name, params)
            except McpError as exc:
                print("Tool call rejected:")
                print(f"{exc.error.code}: {exc.error.message}")
                raise SystemExit(1)
            label = "Tool call failed:" if result.isError else "Tool call result:"
            print(label)
            for item in result.content:
                print(getattr(item, "text", item))


if __name__ == "__main__":
    asyncio.run(main())
