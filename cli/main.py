from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Sequence

from app import DslFacade
from domain.models import AppConfig, UserProfile
from domain.ports import CacheBackendError
from domain.services import (
    TEMPLATES,
    ScriptCache,
    ScriptOrchestrator,
    ScriptSynthesizer,
    derive_cache_key,
    render_template,
)
from infra.browser import PlaywrightPageFetcher
from infra.config import FileSystemConfigProvider
from infra.llm import OpenAIChatClient
from infra.persistence import SQLiteScriptCache
from infra.runtime import StructuredLogger, SystemClock


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="form-dsl")
    parser.add_argument("--config-dir", default="./config", help="Path to config folder")
    parser.add_argument("--db-path", default=None, help="Override CACHE_DB_PATH from config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    gen_p = sub.add_parser("generate", help="Synthesize a DSL script for a page")
    source = gen_p.add_mutually_exclusive_group(required=True)
    source.add_argument("--html-file")
    source.add_argument("--url", help="Capture the page with a headless browser first")
    gen_p.add_argument("--user-data", help="JSON file with user data (defaults to profile.json)")
    gen_p.add_argument("--no-cache", action="store_true")
    gen_p.add_argument("--headless", action="store_true", default=True)
    gen_p.add_argument("--no-headless", dest="headless", action="store_false")

    check_p = sub.add_parser("check", help="Check a script against the DSL grammar")
    check_p.add_argument("script_file")

    sub.add_parser("purge-cache", help="Delete expired cache rows")

    key_p = sub.add_parser("show-key", help="Print the cache key for a page and user data")
    key_p.add_argument("--html-file", required=True)
    key_p.add_argument("--user-data")

    tpl_p = sub.add_parser("template", help="Render a fixed script for a well-known page layout")
    tpl_p.add_argument("name", choices=sorted(TEMPLATES))
    tpl_p.add_argument("--user-data")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config_provider = FileSystemConfigProvider(args.config_dir)

    errors = config_provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return 1
    cfg = config_provider.get_config()
    db_path = args.db_path or cfg.cache_db_path

    if args.command == "check":
        report = DslFacade.check_script(Path(args.script_file).read_text(encoding="utf-8"))
        for err in report.errors:
            print(err)
        print("valid" if report.valid else f"invalid ({len(report.errors)} error(s))")
        return 0 if report.valid else 1

    if args.command == "show-key":
        html = Path(args.html_file).read_text(encoding="utf-8")
        user_data = _load_user_data(args.user_data, config_provider)
        print(derive_cache_key(html, UserProfile.from_user_data(user_data)))
        return 0

    if args.command == "template":
        user_data = _load_user_data(args.user_data, config_provider)
        print(render_template(args.name, UserProfile.from_user_data(user_data)))
        return 0

    if args.command == "purge-cache":
        backend = SQLiteScriptCache(db_path, clock=SystemClock())
        try:
            removed = asyncio.run(backend.purge_expired())
        except CacheBackendError as exc:
            print(f"Cache unavailable: {exc}")
            return 1
        print(f"removed {removed} expired row(s)")
        return 0

    if args.command == "generate":
        use_cache = cfg.cache_enabled and not args.no_cache
        return asyncio.run(
            _handle_generate(args, cfg, config_provider, db_path, use_cache, StructuredLogger())
        )

    raise SystemExit(f"Unsupported command: {args.command}")


async def _handle_generate(
    args: argparse.Namespace,
    cfg: AppConfig,
    config_provider: FileSystemConfigProvider,
    db_path: str,
    use_cache: bool,
    logger: StructuredLogger,
) -> int:
    backend = SQLiteScriptCache(db_path, clock=SystemClock()) if use_cache else None
    llm = (
        OpenAIChatClient(api_key=cfg.llm_api_key, base_url=cfg.llm_base_url, model=cfg.llm_model)
        if cfg.llm_api_key
        else None
    )
    orchestrator = ScriptOrchestrator(
        synthesizer=ScriptSynthesizer(logger=logger, llm=llm),
        logger=logger,
        cache=ScriptCache(backend, logger=logger) if backend is not None else None,
    )
    user_data = _load_user_data(args.user_data, config_provider)
    missing = config_provider.check_upload_files(user_data)
    if missing:
        print("User data check failed:")
        for err in missing:
            print(f"  - {err}")
        return 1

    if args.url:
        async with PlaywrightPageFetcher(headless=args.headless) as fetcher:
            facade = DslFacade(orchestrator=orchestrator, cache_backend=backend, page_fetcher=fetcher)
            response = await facade.generate_for_url(args.url, user_data)
    else:
        facade = DslFacade(orchestrator=orchestrator, cache_backend=backend)
        html = Path(args.html_file).read_text(encoding="utf-8")
        response = await facade.generate({"html": html, "user_data": user_data})

    print(response["script"])
    return 0


def _load_user_data(path: str | None, config_provider: FileSystemConfigProvider) -> Any:
    if path is None:
        return config_provider.get_user_data()
    return json.loads(Path(path).read_text(encoding="utf-8"))


if __name__ == "__main__":
    raise SystemExit(main())
