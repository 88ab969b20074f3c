#!/usr/bin/env python3
"""
graphsource CLI - Main entry point.

Usage:
    graphsource init --url <endpoint>        # Write graphsource.yaml
    graphsource compile [--output-dir DIR]   # Compile queries without fetching entities
    graphsource source [--output FILE]       # Source every entity into a JSON-lines file
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from ..config import DEFAULT_CONFIG_PATH, SourcingConfig, load_config
from ..core.errors import GraphSourceError
from ..runtime.orchestrator import SourcingOrchestrator
from ..sinks import JsonLinesNodeSink
from ..storage import write_compiled_queries

URL_ENV_VAR = "DRUPAL_GRAPHQL_URL"
DEFAULT_DEBUG_DIR = ".cache/compiled-graphql-queries"


def _load(args: argparse.Namespace) -> SourcingConfig:
    """Config file, then command line overrides, then the environment for the url."""
    config = load_config(args.config) or SourcingConfig()
    if args.url:
        config.url = args.url
    elif not config.url:
        config.url = os.environ.get(URL_ENV_VAR)
    if args.language:
        config.languages = list(args.language)
    return config


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    config_path = Path(args.config)

    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists. Use --force to overwrite.")
        return 1

    config = SourcingConfig(
        url=args.url,
        languages=list(args.language or ["EN"]),
        fragments_dir="src/drupal-fragments",
        debug_dir=DEFAULT_DEBUG_DIR,
    )
    config.save(config_path)
    print(f"Created {config_path}")
    return 0


async def _compile(config: SourcingConfig, output_dir: str) -> int:
    orchestrator = SourcingOrchestrator(config)
    try:
        plan = await orchestrator.prepare()
    finally:
        await orchestrator.close()

    written = write_compiled_queries(output_dir, plan.documents)
    print(f"Compiled {len(written)} documents into {output_dir}")
    for type_name, reason in plan.skipped.items():
        print(f"  skipped {type_name}: {reason}")
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile sourcing queries and write them to disk."""
    config = _load(args)
    output_dir = args.output_dir or config.debug_dir or DEFAULT_DEBUG_DIR

    try:
        return asyncio.run(_compile(config, output_dir))
    except GraphSourceError as e:
        print(f"Error: {e}")
        return 1


def cmd_source(args: argparse.Namespace) -> int:
    """Source every entity type into a JSON-lines file."""
    config = _load(args)
    if args.concurrency:
        config.concurrency = args.concurrency

    sink = JsonLinesNodeSink(args.output)
    orchestrator = SourcingOrchestrator(config, sink=sink)

    try:
        report = asyncio.run(orchestrator.run())
    except GraphSourceError as e:
        print(f"Error: {e}")
        return 1
    finally:
        sink.close()

    print(report.summary())
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="graphsource",
        description="graphsource - incremental GraphQL sourcing of Drupal entities"
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_common(sub: argparse.ArgumentParser):
        sub.add_argument("--url", help=f"GraphQL endpoint (default: config, then ${URL_ENV_VAR})")
        sub.add_argument(
            "--language", "-l",
            action="append",
            help="Language code, repeatable (default: EN)",
        )

    # init
    init_parser = subparsers.add_parser("init", help="Write default configuration")
    add_common(init_parser)
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing config")

    # compile
    compile_parser = subparsers.add_parser("compile", help="Compile queries without sourcing")
    add_common(compile_parser)
    compile_parser.add_argument("--output-dir", "-o", help="Directory for compiled queries")

    # source
    source_parser = subparsers.add_parser("source", help="Source all entities")
    add_common(source_parser)
    source_parser.add_argument("--output", "-o", default="nodes.jsonl", help="JSON-lines output file")
    source_parser.add_argument("--concurrency", type=int, help="Entity types sourced in parallel")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "compile": cmd_compile,
        "source": cmd_source,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
