from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .caption_core.errors import CaptionError, ConfigError
from .config import BotSettings, load_config, resolve_config_path
from .logger import get_logger, setup_logging
from .renderer import CaptionRenderer

logger = get_logger("cli")


def _load_renderer(args: argparse.Namespace) -> CaptionRenderer:
    config_path = resolve_config_path(args.config)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        logger.error("Invalid configuration %s: %s", config_path, exc)
        sys.exit(1)
    return CaptionRenderer.from_config(config)


def handle_run(args: argparse.Namespace) -> None:
    from .bot import AdminGate, CaptionBot

    settings = BotSettings.from_env()
    if not settings.token:
        logger.error("DISCORD_BOT_TOKEN is missing")
        sys.exit(1)
    if settings.admin_password is None:
        logger.warning("No bot admin password specified")

    renderer = _load_renderer(args)
    bot = CaptionBot(renderer, AdminGate(settings.admin_password))
    logger.info("Connecting")
    bot.run(settings.token, log_handler=None)


def handle_render(args: argparse.Namespace) -> None:
    renderer = _load_renderer(args)
    try:
        image = renderer.handle(args.message)
    except CaptionError as exc:
        logger.error("Unable to render %r: %s", args.message, exc)
        sys.exit(1)

    output = Path(args.output) if args.output else Path(image.filename)
    output.write_bytes(image.data)
    print(f"Wrote {len(image.data)} bytes to {output}")


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Caption images from chat messages")
    parser.add_argument("--config", help="Path to config.toml (default: $CAPTION_BOT_CONFIG or ./config.toml)")
    parser.add_argument("--log-level", help="Logging level (default: $LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Connect to Discord and answer messages")

    render_parser = subparsers.add_parser("render", help="Render one message to a file")
    render_parser.add_argument("message", help='Message as a user would send it, e.g. "wide hello"')
    render_parser.add_argument("-o", "--output", help="Output file (default: named after the image)")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "run":
        handle_run(args)
    elif args.command == "render":
        handle_render(args)


if __name__ == "__main__":
    main()
