# src/main.py — v1
"""CLI entry point — favicon and screenshot commands.

Usage:
    markmedia favicon <domain>... [--size N] [--no-cache] [--no-fallback]
    markmedia screenshot <url>... [--full-page] [--quality N] [--no-cache]

Results are printed to stdout as a JSON object keyed by the input string;
logs go to stderr. Inputs that could not be resolved at all are absent from
the output.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from markmedia.config.settings import ConfigurationError, Settings, load_settings
from markmedia.logging.logger import setup_logging
from markmedia.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except (ConfigurationError, ValidationError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(args.verbose, settings)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="markmedia",
        description=f"markmedia v{__version__} — favicon and screenshot cache",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- favicon ---
    p_favicon = subparsers.add_parser(
        "favicon", help="Resolve favicons for one or more domains",
    )
    p_favicon.add_argument("domains", nargs="+", help="Domains or URLs")
    p_favicon.add_argument(
        "--size", type=int, default=None,
        help="Icon size in pixels (default: FAVICON_DEFAULT_SIZE)",
    )
    p_favicon.add_argument(
        "--no-cache", action="store_true",
        help="Skip the durable cache (read and write)",
    )
    p_favicon.add_argument(
        "--no-fallback", action="store_true",
        help="Omit domains with no real favicon instead of using an avatar",
    )
    p_favicon.set_defaults(func=_cmd_favicon)

    # --- screenshot ---
    p_shot = subparsers.add_parser(
        "screenshot", help="Capture screenshots for one or more URLs",
    )
    p_shot.add_argument("urls", nargs="+", help="Absolute URLs")
    p_shot.add_argument(
        "--full-page", action="store_true",
        help="Capture the full page instead of the viewport",
    )
    p_shot.add_argument(
        "--quality", type=int, default=None,
        help="Image quality 1-100 (default: SCREENSHOT_QUALITY)",
    )
    p_shot.add_argument(
        "--no-cache", action="store_true",
        help="Skip the durable cache (read and write)",
    )
    p_shot.set_defaults(func=_cmd_screenshot)

    return parser


async def _cmd_favicon(args: argparse.Namespace, settings: Settings) -> int:
    """Resolve favicons and print them."""
    from markmedia.api.facade import build_services, resolve_favicons
    from markmedia.core.models import FaviconOptions

    options = FaviconOptions(
        size=settings.favicon_default_size if args.size is None else args.size,
        use_cache=not args.no_cache,
        timeout_ms=settings.favicon_timeout_ms,
        fallback_to_generic=not args.no_fallback,
    )

    services = build_services(settings)
    try:
        await services.start()
        results = await resolve_favicons(services, args.domains, options)
    finally:
        await services.aclose()

    _print_results(results)
    return 0 if results else 1


async def _cmd_screenshot(args: argparse.Namespace, settings: Settings) -> int:
    """Capture screenshots and print them."""
    from markmedia.api.facade import build_services, capture_screenshots
    from markmedia.core.models import ScreenshotOptions

    options = ScreenshotOptions(
        use_cache=not args.no_cache,
        timeout_ms=settings.screenshot_timeout_ms,
        quality=settings.screenshot_quality if args.quality is None else args.quality,
        full_page=args.full_page,
        wait_for_ms=settings.screenshot_wait_for_ms,
    )

    services = build_services(settings)
    try:
        await services.start()
        results = await capture_screenshots(services, args.urls, options)
    finally:
        await services.aclose()

    _print_results(results)
    return 0 if results else 1


def _print_results(results: dict) -> None:
    """Print results as one JSON object."""
    payload = {key: value.model_dump() for key, value in results.items()}
    print(json.dumps(payload, indent=2))


def _setup_logging(verbose: bool, settings: Settings) -> None:
    """Configure logging for CLI usage (stderr, stdout is for results)."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
