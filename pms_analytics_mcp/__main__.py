#!/usr/bin/env python3
"""PMS Analytics MCP Server - Module Entry Point.

Allows running the server as: python -m pms_analytics_mcp
"""

import argparse
import asyncio


def main() -> None:
    """Main entry point for the PMS Analytics MCP server."""
    parser = argparse.ArgumentParser(
        description="PMS Analytics MCP Server",
        prog="pms-analytics-mcp",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )

    args = parser.parse_args()

    if args.version:
        from .main import VERSION

        print(f"PMS Analytics MCP Server v{VERSION}")
        return

    # Import and run the server
    from .main import main as server_main

    asyncio.run(server_main())


if __name__ == "__main__":
    main()
