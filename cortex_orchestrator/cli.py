#!/usr/bin/env python3
"""
CORTEX Orchestrator CLI — Runs the MCP server over stdio.

Usage:
    cortex-orchestrator                 # serve over stdio
    cortex-orchestrator --check         # verify n8n connectivity and exit
    python -m cortex_orchestrator --log-level DEBUG --json-logs
"""

from __future__ import annotations

import argparse
import asyncio

import structlog

from cortex_orchestrator.config import OrchestratorSettings, get_settings
from cortex_orchestrator.connectors.n8n_connector import N8nConnector
from cortex_orchestrator.logging import setup_logging
from cortex_orchestrator.server import serve_stdio
from cortex_orchestrator.version import SERVER_NAME, VERSION

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server that routes tools and pipeline tasks to n8n workflows.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--log-level", help="Override LOG_LEVEL (e.g. DEBUG, INFO)")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines on stderr",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check connectivity to n8n and exit",
    )
    return parser


async def check_connection(settings: OrchestratorSettings) -> bool:
    async with N8nConnector(settings) as connector:
        healthy = await connector.health_check()
    logger.info("n8n_health_check", healthy=healthy, n8n=settings.api_base_url)
    return healthy


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    setup_logging(
        level=args.log_level or settings.log_level,
        json_output=args.json_logs or settings.log_json,
    )

    if args.check:
        return 0 if asyncio.run(check_connection(settings)) else 1

    try:
        asyncio.run(serve_stdio(settings))
    except KeyboardInterrupt:
        logger.info("server_interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
