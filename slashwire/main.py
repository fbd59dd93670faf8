"""Console entry point: publish an application's commands to Discord.

Usage::

    slashwire-sync mybot.commands:handler --guild 123456789
    slashwire-sync mybot.commands:handler --dry-run

TARGET is ``module:attribute`` resolving to an InteractionHandler (or
a zero-argument callable returning one). Credentials come from the
config directory (settings.yaml + .env) and the environment.

Key functions:
    main: Async sync routine, returns a process exit code.
    run: Synchronous wrapper for the ``slashwire-sync`` console script.
"""

import argparse
import asyncio
import importlib
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .logging_config import setup_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_TARGET = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slashwire-sync",
        description="Bulk-overwrite an application's slash and context-menu commands.",
    )
    parser.add_argument("target", help="module:attribute of the InteractionHandler")
    parser.add_argument("--guild", default="", help="guild id to publish to (default: config, else global)")
    parser.add_argument("--config-dir", type=Path, default=None, help="directory holding settings.yaml and .env")
    parser.add_argument("--dry-run", action="store_true", help="print the payload instead of publishing it")
    return parser


def load_handler(target: str):
    """Import ``module:attribute`` and return the InteractionHandler.

    Raises:
        ValueError: The target is malformed or does not resolve to a handler.
    """
    from .handler import InteractionHandler

    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"target must look like 'module:attribute', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"cannot import {module_name!r}: {e}") from e

    obj = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ValueError(f"{module_name!r} has no attribute {attribute!r}") from None
    if not isinstance(obj, InteractionHandler) and callable(obj):
        obj = obj()
    if not isinstance(obj, InteractionHandler):
        raise ValueError(f"{target!r} is not an InteractionHandler")
    return obj


async def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, load the handler and publish (or print) its commands."""
    args = build_parser().parse_args(argv)

    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("slashwire")

    from .client import DiscordClient
    from .config import get_config
    from .exceptions import SlashwireError

    config = get_config(args.config_dir)
    config.validate()

    # Phase 2: reconfigure with real config
    setup_logging(config)

    try:
        handler = load_handler(args.target)
    except ValueError as e:
        logger.error("bad_target", target=args.target, error=str(e))
        return EXIT_BAD_TARGET

    if not handler.default_guild_id:
        handler.default_guild_id = config.default_guild_id

    if args.dry_run:
        payload = [command.to_payload() for command in handler.collect_commands(args.guild)]
        print(json.dumps(payload, indent=2))
        return EXIT_OK

    client = handler.client or DiscordClient(
        config.discord_token,
        api_base_url=config.api_base_url,
        timeout=config.request_timeout,
    )
    handler.client = client
    if not client.token:
        client.token = config.discord_token
    if not client.application_id:
        client.application_id = config.application_id

    try:
        async with client:
            if not client.application_id:
                await client.fetch_application_id()
            await handler.register_commands(args.guild)
    except SlashwireError as e:
        logger.error("sync_failed", error=str(e), category=e.category.value)
        return EXIT_FAILED

    return EXIT_OK


def run():
    """Synchronous entry point for the ``slashwire-sync`` console script."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    run()
