"""
Main entry point for the function app tester.

Runs the MCP server on stdio. Logs go to stderr; stdout belongs to the
MCP channel.
"""
from __future__ import annotations

import asyncio
import sys

from .config import TesterConfig, build_config
from .observability import format_metrics, setup_logger
from .server import FunctionAppTester, build_http_client


async def serve(config: TesterConfig) -> None:
    logger = setup_logger(config.log_level)
    logger.info(f"Forwarding test_endpoint calls to {config.base_url} (auth mode: {config.auth.mode})")
    async with build_http_client(config) as http_client:
        tester = FunctionAppTester(config, http_client, logger=logger)
        try:
            await tester.run()
        finally:
            logger.info(f"Call summary: {format_metrics(tester.metrics)}")


def main() -> None:
    """Start the function app tester on stdio."""
    try:
        config = build_config()
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        print("\nServer shutdown requested...", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Failed to start function app tester: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
