"""
Job Ingest — ATS job reconciliation and enrichment
CLI entry point for crawling providers and managing tracked companies.
"""

import argparse
import asyncio
import os
import sys
import time
from datetime import datetime, timezone

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config.context import AppContext, build_context
from config.log import configure
from config.settings import Settings, settings
from models.company import CompanyKey
from models.enums import Provider
from tools.errors import AppError
from tools.file_handler import load_companies


def days_ago_ms(days: float) -> int:
    """Epoch ms for `days` before now."""
    return int((time.time() - days * 86400) * 1000)


async def cmd_crawl(ctx: AppContext, args) -> None:
    provider = Provider(args.provider) if args.provider else None
    replace_older_than = days_ago_ms(args.replace_older_than) if args.replace_older_than is not None else None

    queued = await ctx.engine.crawl(provider, replace_older_than)
    print(f"🔍 Crawling {queued} companies...")


async def cmd_add(ctx: AppContext, args) -> None:
    groups: dict[Provider, list[str]] = {}

    if args.config:
        for entry in load_companies(args.config):
            groups.setdefault(entry.provider, []).append(entry.id)
    if args.ids:
        if not args.provider:
            print("❌ --provider is required when passing company ids.")
            sys.exit(1)
        groups.setdefault(Provider(args.provider), []).extend(args.ids)

    if not groups:
        print("❌ No companies to add.")
        sys.exit(1)

    for provider, ids in groups.items():
        result = await ctx.engine.add_companies(provider, ids)
        print(f"➕ {provider.value}: {len(result.added)} added, {len(result.existing)} already tracked")
        for id, error in result.failed.items():
            print(f"   ⚠️  {id}: {error}")


async def cmd_remove(ctx: AppContext, args) -> None:
    key = CompanyKey(id=args.id, provider=Provider(args.provider))
    if await ctx.engine.remove_company(key):
        print(f"🗑️  Removed {key}")
    else:
        print(f"⚠️  {key} was not tracked")


async def cmd_metadata(ctx: AppContext, args) -> None:
    await ctx.metadata.refresh_company_metadata()
    await ctx.metadata.refresh_job_metadata()
    meta = await ctx.metadata.get_metadata()

    print(f"🏢 Companies: {meta['company_count']}")
    print(f"💼 Jobs:      {meta['job_count']}")


COMMANDS = {
    "crawl": cmd_crawl,
    "add": cmd_add,
    "remove": cmd_remove,
    "metadata": cmd_metadata,
}


async def run_once(config: Settings, args) -> None:
    """Build a context, run one command and wait for all queued work."""
    ctx = build_context(config)
    try:
        await COMMANDS[args.command](ctx, args)
        await ctx.settle()
    finally:
        await ctx.close()

    calls = getattr(ctx.telemetry, "call_count", None)
    errors = getattr(ctx.telemetry, "errors", [])
    if calls is not None:
        print(f"📊 {calls} upstream calls, {len(errors)} error(s)")


def build_parser() -> argparse.ArgumentParser:
    providers = [p.value for p in Provider]

    parser = argparse.ArgumentParser(
        description="Job Ingest — ATS job reconciliation and enrichment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py add --provider greenhouse airbnb stripe
  python run.py add --config config/companies.yaml
  python run.py crawl
  python run.py crawl --provider lever --replace-older-than 7
  python run.py crawl --schedule 60
  python run.py remove --provider greenhouse airbnb
  python run.py metadata
        """,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help=f"Logging level (default: {settings.log_level})",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="Reconcile jobs for tracked companies")
    crawl.add_argument("--provider", choices=providers, default=None, help="Only crawl this provider")
    crawl.add_argument(
        "--replace-older-than",
        type=float,
        default=None,
        metavar="DAYS",
        help="Re-enrich kept jobs last written more than DAYS ago",
    )
    crawl.add_argument(
        "--schedule",
        type=int,
        default=None,
        metavar="MINUTES",
        help="Run on a schedule every N minutes (e.g. --schedule 60)",
    )

    add = sub.add_parser("add", help="Start tracking companies")
    add.add_argument("--provider", choices=providers, default=None)
    add.add_argument("--config", type=str, default=None, help="YAML file listing companies")
    add.add_argument("ids", nargs="*", help="Board tokens / slugs")

    remove = sub.add_parser("remove", help="Stop tracking a company and delete its jobs")
    remove.add_argument("--provider", choices=providers, required=True)
    remove.add_argument("id", help="Board token / slug")

    sub.add_parser("metadata", help="Recount companies and jobs")

    return parser


def main():
    """Main entry point for the job ingest system."""
    args = build_parser().parse_args()

    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure(settings.log_level)

    if args.command == "add" and args.config and not os.path.exists(args.config):
        print(f"❌ Config file not found: {args.config}")
        sys.exit(1)

    print("=" * 60)
    print("  🔍 Job Ingest — ATS job reconciliation and enrichment")
    print("=" * 60)
    print(f"  LLM:    {settings.llm_model_name} @ {settings.llm_base_url}")
    print(f"  Store:  {settings.db_path}")
    print(f"  Mode:   {args.command}")
    if getattr(args, "schedule", None):
        print(f"  Every:  ⏰ {args.schedule} min")
    print("=" * 60)
    print()

    # ── Scheduled mode ───────────────────────────────────────
    if getattr(args, "schedule", None):
        interval = args.schedule
        print(f"⏰ Starting scheduler — running every {interval} minutes")
        print(f"   Press Ctrl+C to stop.\n")

        cycle = 0
        while True:
            cycle += 1
            now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
            print(f"\n{'─' * 60}")
            print(f"  Cycle #{cycle} — {now}")
            print(f"{'─' * 60}\n")

            try:
                asyncio.run(run_once(settings, args))
            except KeyboardInterrupt:
                raise
            except Exception as e:
                print(f"❌ Cycle #{cycle} failed: {e}")

            print(f"\n💤 Sleeping {interval} minutes until next run...")
            try:
                time.sleep(interval * 60)
            except KeyboardInterrupt:
                print("\n\n⛔ Scheduler stopped.")
                sys.exit(0)

    # ── Single run mode ──────────────────────────────────────
    else:
        try:
            asyncio.run(run_once(settings, args))
            print("\n✅ Done!")
        except KeyboardInterrupt:
            print("\n\n⛔ Interrupted by user.")
            sys.exit(1)
        except AppError as e:
            print(f"\n❌ {' <- '.join(e.to_error_list())}")
            sys.exit(1)


if __name__ == "__main__":
    main()
