"""Command-line entry point: resolve the extract path and serve the API."""

import argparse
import os
from pathlib import Path

import uvicorn

from osmrest import config
from osmrest.logging_config import setup_logging
from osmrest.main import create_app


def file_exists(path: str) -> Path:
    """argparse type accepting only paths that exist."""
    resolved = Path(path)
    if not resolved.exists():
        raise argparse.ArgumentTypeError(f"{path} does not exist")
    return resolved


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="osmrest",
        description="Serve the nodes and ways of an OSM PBF extract as JSON.",
    )
    parser.add_argument(
        "-o", "--osmfile",
        type=file_exists,
        default=config.OSM_FILE,
        required=config.OSM_FILE is None,
        help="OSM PBF extract to serve (default: $OSM_FILE)",
    )
    parser.add_argument("--host", default=config.HOST,
                        help=f"Address to bind (default: {config.HOST})")
    parser.add_argument("--port", type=int, default=config.PORT,
                        help=f"Port to bind (default: {config.PORT})")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        type=str.upper,
                        help=f"Logging level (default: {config.LOG_LEVEL})")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(args.log_level)

    app = create_app(os.fspath(args.osmfile))

    print(f"Serving HTTP on {args.host} port {args.port} (http://{args.host}:{args.port}/) ...")
    uvicorn.run(app, host=args.host, port=args.port, access_log=False, log_config=None)
    return 0
