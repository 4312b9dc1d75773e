# src/main.py - v3
"""CLI entry point: translate, stats, markdown, cache commands.

Usage:
    tabilingo translate <document_id> [--lang en,fr|all] [--force] [--dry-run] [--timeout S]
    tabilingo stats <document_id>
    tabilingo markdown <paths...> [--lang ...] [--force] [--dry-run]
    tabilingo cache stats|cleanup|clear

Exit codes: 0 success, 10 validation error, 20 translation error,
30 connectivity error (fetch failure, timeout, unexpected).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from tabilingo.cache.cache_factory import create_cache_store
from tabilingo.cache.translation_cache import TranslationCache
from tabilingo.config.languages import TARGET_LANGUAGES, parse_language_list
from tabilingo.config.settings import ConfigurationError, Settings, load_settings
from tabilingo.core.errors import TranslationError
from tabilingo.core.models import TranslationOptions, TranslationRunResult
from tabilingo.engine.markdown_translator import MarkdownTranslator
from tabilingo.engine.translation_engine import TranslationEngine
from tabilingo.logging.logger import setup_logging
from tabilingo.provider.deepl_adapter import DeepLProvider
from tabilingo.provider.translation_client import TranslationClient
from tabilingo.store.sanity_store import SanityDocumentStore
from tabilingo.tracking.cost_calculator import format_character_count
from tabilingo.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 10
EXIT_TRANSLATION = 20
EXIT_CONNECTIVITY = 30

_VALIDATION_CODES = frozenset({
    "invalid_target_language",
    "invalid_structure",
    "wrong_source_language",
    "already_a_translation",
    "document_not_found",
})
_TRANSLATION_CODES = frozenset({
    "quota_would_be_exceeded",
    "monthly_limit_exceeded",
    "provider_call_failed",
    "unsupported_language",
})


def exit_code_for(result: TranslationRunResult) -> int:
    """Map a run result to a process exit code."""
    if result.success:
        return EXIT_OK
    if result.error_code in _VALIDATION_CODES:
        return EXIT_VALIDATION
    if result.error_code is None or result.error_code in _TRANSLATION_CODES:
        return EXIT_TRANSLATION
    return EXIT_CONNECTIVITY


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_VALIDATION

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=args.log_format or settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return EXIT_CONNECTIVITY


def cli() -> None:
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tabilingo",
        description=f"tabilingo v{__version__}: translate Japanese articles into 19 languages",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--log-format", choices=["json", "text"], default=None,
        help="Log output format (default: LOG_FORMAT setting)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- translate ---
    p_translate = subparsers.add_parser(
        "translate", help="Translate one CMS article",
    )
    p_translate.add_argument("document_id", help="Source document id")
    _add_translation_flags(p_translate)
    p_translate.add_argument(
        "--timeout", type=float, default=None,
        help="Abort the run after this many seconds",
    )
    p_translate.set_defaults(func=_cmd_translate)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show translation status and estimated cost",
    )
    p_stats.add_argument("document_id", help="Source document id")
    p_stats.set_defaults(func=_cmd_stats)

    # --- markdown ---
    p_markdown = subparsers.add_parser(
        "markdown", help="Translate Markdown files",
    )
    p_markdown.add_argument(
        "paths", nargs="+", type=Path,
        help="Markdown files or directories to scan",
    )
    _add_translation_flags(p_markdown)
    p_markdown.set_defaults(func=_cmd_markdown)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Inspect or maintain the translation cache",
    )
    p_cache.add_argument("action", choices=["stats", "cleanup", "clear"])
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _add_translation_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--lang", default=None,
        help='Target languages (comma-separated) or "all" (default: TARGET_LANGUAGES setting)',
    )
    parser.add_argument(
        "--force", action="store_true",
        help="Re-translate even if a translation exists",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Translate but do not persist documents or files",
    )


# --- Wiring ---


@dataclass
class _Services:
    cache: TranslationCache | None
    client: TranslationClient
    provider: DeepLProvider


@asynccontextmanager
async def _open_services(settings: Settings, with_cache: bool = True):
    cache = None
    if with_cache and settings.cache_enabled:
        cache = TranslationCache(create_cache_store(settings), ttl_days=settings.cache_ttl_days)
        await cache.load()
    provider = DeepLProvider(
        api_key=settings.deepl_api_key,
        server_url=settings.deepl_server_url,
    )
    client = TranslationClient.from_settings(settings, provider, cache=cache)
    try:
        yield _Services(cache=cache, client=client, provider=provider)
    finally:
        await provider.close()


def _languages(value: str | None, settings: Settings) -> list[str]:
    return parse_language_list(value) if value is not None else settings.target_languages_list


# --- Commands ---


async def _cmd_translate(args: argparse.Namespace, settings: Settings) -> int:
    """Translate one CMS article and report per-language outcomes."""
    options = TranslationOptions(
        languages=_languages(args.lang, settings),
        force=args.force,
        dry_run=args.dry_run,
    )
    store = SanityDocumentStore.from_settings(settings)
    try:
        async with _open_services(settings) as services:
            engine = TranslationEngine(services.client, store, settings)
            try:
                result = await asyncio.wait_for(
                    engine.translate_document(args.document_id, options),
                    timeout=args.timeout,
                )
            except asyncio.TimeoutError:
                logger.error("Translation run timed out after %ss", args.timeout)
                print(f"\nTranslation timed out after {args.timeout}s")
                return EXIT_CONNECTIVITY
    finally:
        await store.close()

    _print_run_summary(args.document_id, result, options.dry_run)
    return exit_code_for(result)


async def _cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    """Display translation status and estimated cost for one article."""
    store = SanityDocumentStore.from_settings(settings)
    try:
        async with _open_services(settings, with_cache=False) as services:
            engine = TranslationEngine(services.client, store, settings)
            result = await engine.get_stats(args.document_id)
    except TranslationError as e:
        logger.error("Stats failed: %s", e, extra={"data": {"code": e.code}})
        return EXIT_VALIDATION if e.code in _VALIDATION_CODES else EXIT_CONNECTIVITY
    finally:
        await store.close()

    existing = [s.language for s in result.translation_status if s.exists]
    missing = [s.language for s in result.translation_status if not s.exists]
    print(f"\nStatistics for {args.document_id}:")
    print(f"  Title:        {result.source_document.title}")
    print(f"  Characters:   {format_character_count(result.total_characters)}")
    print(f"  Translated:   {len(existing)}/{len(result.translation_status)} {', '.join(existing)}")
    print(f"  Missing:      {', '.join(missing) or '-'}")
    print(f"  Est. cost:    ${result.estimated_cost:.4f}")
    return EXIT_OK


async def _cmd_markdown(args: argparse.Namespace, settings: Settings) -> int:
    """Translate Markdown files found under the given paths."""
    languages = _languages(args.lang, settings)
    invalid = [lang for lang in languages if lang not in TARGET_LANGUAGES]
    if invalid:
        logger.error(
            "Invalid target languages",
            extra={"data": {"invalid": invalid, "supported": list(TARGET_LANGUAGES)}},
        )
        return EXIT_VALIDATION

    files = sorted(set(find_markdown_files(args.paths)))
    if not files:
        logger.warning("No Markdown files found", extra={"data": {"paths": [str(p) for p in args.paths]}})
        return EXIT_OK

    async with _open_services(settings) as services:
        cache = services.cache if services.cache is not None else TranslationCache()
        translator = MarkdownTranslator(services.client, cache, settings)
        result = await translator.process_files(
            files, languages, dry_run=args.dry_run, force=args.force,
        )

    print("\nMarkdown translation complete:")
    print(f"  Files:        {len(files)}")
    print(f"  Translated:   {result.translated}")
    print(f"  Skipped:      {result.skipped}")
    print(f"  Errors:       {result.errors}")
    return EXIT_TRANSLATION if result.errors else EXIT_OK


async def _cmd_cache(args: argparse.Namespace, settings: Settings) -> int:
    """Show, clean up or clear the persisted translation cache."""
    cache = TranslationCache(create_cache_store(settings), ttl_days=settings.cache_ttl_days)
    await cache.load()

    if args.action == "cleanup":
        removed = cache.cleanup()
        await cache.save()
        print(f"Removed {removed} expired translations")
    elif args.action == "clear":
        count = len(cache)
        cache.clear()
        await cache.save()
        print(f"Cleared {count} translations")
    else:
        stats = cache.stats()
        oldest = stats.oldest_entry.isoformat() if stats.oldest_entry else "-"
        print("\nCache statistics:")
        print(f"  Entries:      {stats.total_entries}")
        print(f"  Translations: {stats.total_translations}")
        print(f"  Oldest:       {oldest}")
    return EXIT_OK


# --- Helpers ---


def find_markdown_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Yield source Markdown files; directories are scanned recursively.

    Files inside a `<lang>/` output directory are translations and skipped.
    """
    for path in paths:
        if path.is_dir():
            for candidate in path.rglob("*.md"):
                if candidate.parent.name not in TARGET_LANGUAGES:
                    yield candidate
        elif path.suffix == ".md" and path.is_file():
            yield path


def _print_run_summary(document_id: str, result: TranslationRunResult, dry_run: bool) -> None:
    """Print a human-readable summary of a TranslationRunResult."""
    label = "Dry run" if dry_run else "Translation"
    print(f"\n{label} {'complete' if result.success else 'finished with errors'}:")
    print(f"  Document ID:  {document_id}")
    print(f"  Languages:    {', '.join(o.language for o in result.results) or '-'}")
    print(f"  Characters:   {format_character_count(result.total_characters_used)}")
    if result.persistence is not None:
        p = result.persistence
        print(f"  Persisted:    {p.successful} created, {p.skipped} skipped, {p.failed} failed")
    if result.api_quota_status is not None:
        q = result.api_quota_status
        print(f"  Quota:        {q.character_count}/{q.character_limit} ({q.percentage:.1f}%)")
    for error in result.errors:
        print(f"  Error:        {error}")


if __name__ == "__main__":
    sys.exit(main())
