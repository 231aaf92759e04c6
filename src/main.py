# src/main.py - v2
"""CLI entry point: fingerprint, init, lookup, invalidate, stats commands.

Usage:
    semcache fingerprint <text>
    semcache init
    semcache lookup <text> [--variant VARIANT]
    semcache invalidate <text> [--variant VARIANT]
    semcache stats

Backends are configured through .env / environment variables (see
semcache.config.settings).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from semcache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="semcache",
        description=f"semcache v{__version__} - tiered semantic cache for AI feedback",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- fingerprint ---
    p_fp = subparsers.add_parser(
        "fingerprint", help="Print the content fingerprint of a text",
    )
    p_fp.add_argument("text", help="Content to fingerprint")
    p_fp.add_argument(
        "--variant", default=None,
        help="Also print the exact cache key for this variant",
    )
    p_fp.set_defaults(func=_cmd_fingerprint)

    # --- init ---
    p_init = subparsers.add_parser(
        "init", help="Create the approximate-match collection if missing",
    )
    p_init.set_defaults(func=_cmd_init)

    # --- lookup ---
    p_lookup = subparsers.add_parser(
        "lookup", help="Look up a text in both tiers without computing",
    )
    p_lookup.add_argument("text", help="Content to look up")
    p_lookup.add_argument(
        "--variant", default=None,
        help="Cache variant (default: CACHE_DEFAULT_VARIANT)",
    )
    p_lookup.set_defaults(func=_cmd_lookup)

    # --- invalidate ---
    p_inv = subparsers.add_parser(
        "invalidate", help="Remove a text from both tiers",
    )
    p_inv.add_argument("text", help="Content to invalidate")
    p_inv.add_argument(
        "--variant", default=None,
        help="Only this variant (default: every configured variant)",
    )
    p_inv.set_defaults(func=_cmd_invalidate)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show configured backends and approximate-store size",
    )
    p_stats.set_defaults(func=_cmd_stats)

    return parser


async def _cmd_fingerprint(args: argparse.Namespace) -> int:
    """Print the fingerprint (and optionally the exact key) of a text."""
    from semcache.cache.fingerprint import exact_cache_key, fingerprint, normalize

    content_hash = fingerprint(args.text)
    print(f"normalized:  {normalize(args.text)!r}")
    print(f"fingerprint: {content_hash}")
    if args.variant:
        settings = _load_settings(args.verbose)
        key = exact_cache_key(content_hash, args.variant, settings.cache_key_prefix)
        print(f"key:         {key}")
    return 0


async def _cmd_init(args: argparse.Namespace) -> int:
    """Create the approximate-match collection if it does not exist."""
    settings = _load_settings(args.verbose)
    from semcache.vector_store.vector_store_factory import create_vector_store

    store = create_vector_store(settings)
    if store is None:
        print("Vector store disabled (VECTOR_DB_TYPE=none); nothing to initialize")
        return 0

    try:
        ready = await store.ensure_collection()
    finally:
        await store.close()

    if not ready:
        logger.error(
            "Collection %s is not usable", settings.vector_db_collection
        )
        return 1
    print(f"Initialized: collection={settings.vector_db_collection} "
          f"vector_db={settings.vector_db_type}")
    return 0


async def _cmd_lookup(args: argparse.Namespace) -> int:
    """Run a read-only lookup and print the outcome as JSON."""
    settings = _load_settings(args.verbose)
    from semcache.cache.cache_factory import create_semantic_cache

    cache = await create_semantic_cache(settings)
    try:
        outcome = await cache.lookup(args.text, variant=args.variant)
    finally:
        await cache.aclose()

    print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    return 0


async def _cmd_invalidate(args: argparse.Namespace) -> int:
    """Remove cached results for a text."""
    settings = _load_settings(args.verbose)
    from semcache.cache.cache_factory import create_semantic_cache

    cache = await create_semantic_cache(settings)
    try:
        await cache.invalidate(args.text, variant=args.variant)
    finally:
        await cache.aclose()

    scope = args.variant or "all variants"
    print(f"Invalidated ({scope})")
    return 0


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Display backend configuration and approximate-store point count."""
    settings = _load_settings(args.verbose)
    from semcache.cache.cache_factory import create_semantic_cache

    cache = await create_semantic_cache(settings)
    try:
        points = await cache.vector_count()
    finally:
        await cache.aclose()

    print(f"\nCache configuration:")
    print(f"  Exact store:   {settings.exact_store_backend}")
    print(f"  Vector store:  {settings.vector_db_type}")
    print(f"  Embeddings:    {settings.embedding_provider}")
    print(f"  Threshold:     {settings.similarity_threshold:.2f}")
    print(f"  Vector points: {points}")
    return 0


def _load_settings(verbose: bool):
    """Load settings and configure logging from them."""
    from semcache.config.settings import load_settings
    from semcache.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    return settings


if __name__ == "__main__":
    sys.exit(main())
