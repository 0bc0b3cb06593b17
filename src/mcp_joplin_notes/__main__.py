"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .settings import Settings

logger = logging.getLogger(__name__)

TOKEN_HINT = "Find your token in Joplin: Tools > Options > Web Clipper"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-joplin-notes",
        description="Joplin MCP server",
    )
    parser.add_argument("--env-file", help="Load environment variables from file")
    parser.add_argument("--port", type=int, help="Joplin port (default: 41184)")
    parser.add_argument("--token", help="Joplin API token")
    parser.add_argument(
        "--transport",
        choices=["stdio", "streamable-http"],
        help="MCP transport (default: stdio)",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the environment, an optional env file and CLI overrides."""
    overrides: dict[str, Any] = {}
    if args.port is not None:
        overrides["JOPLIN_PORT"] = args.port
    if args.token:
        overrides["JOPLIN_TOKEN"] = args.token
    if args.transport:
        overrides["MCP_TRANSPORT"] = args.transport

    if args.env_file:
        env_path = Path(args.env_file).resolve()
        if not env_path.is_file():
            raise FileNotFoundError(f"Environment file not found: {env_path}")
        return Settings(_env_file=env_path, **overrides)
    return Settings(**overrides)


def configure_logging(settings: Settings) -> None:
    # stdout carries the stdio MCP stream.
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        logging.getLogger().addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as exc:
        if any(err.get("loc") == ("JOPLIN_TOKEN",) for err in exc.errors()):
            print(
                "Error: JOPLIN_TOKEN is required. Use --token <token> or set the "
                "JOPLIN_TOKEN environment variable.",
                file=sys.stderr,
            )
            print(TOKEN_HINT, file=sys.stderr)
        else:
            print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)
    logger.info(
        "Starting Joplin MCP server (transport=%s, joplin=%s)",
        settings.mcp_transport,
        settings.client_config().base_url,
    )

    if settings.mcp_transport == "streamable-http":
        import uvicorn

        from .asgi import create_app

        uvicorn.run(
            create_app(settings),
            host=settings.mcp_host,
            port=settings.mcp_port,
            log_level=settings.log_level.lower(),
        )
        return

    from .mcp_server import create_mcp_server

    create_mcp_server(settings).run(transport="stdio")


if __name__ == "__main__":
    main()
