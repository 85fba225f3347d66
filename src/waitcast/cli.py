"""
waitcast CLI entrypoint.

This CLI is the client front end: pick a region/store/date, look at queue
statistics, and estimate when to draw a ticket for a planned visit time.
All orchestration lives in `waitcast.app.session.WaitSession`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from pydantic import BaseModel

from waitcast.app.context import AppContext, SelectionRepository
from waitcast.app.notices import Notice, notice_for_error
from waitcast.app.platform import CliLocationPlatform
from waitcast.app.session import WaitSession
from waitcast.config.settings import Settings, get_settings
from waitcast.core.env import resolve_project_path
from waitcast.core.errors import WaitcastError
from waitcast.core.logging import configure_logging
from waitcast.core.storage import JsonKeyValueStore
from waitcast.domain.models import Coordinate, DiningReport, QueueSnapshot, Store
from waitcast.geo.resolver import GeoResolver
from waitcast.ingestion.backend_client import BackendClient


def _state_store(settings: Settings) -> JsonKeyValueStore:
    return JsonKeyValueStore(resolve_project_path(settings.storage.state_path))


def _platform(settings: Settings, args: argparse.Namespace) -> CliLocationPlatform:
    coordinate = None
    lat, lon = getattr(args, "lat", None), getattr(args, "lon", None)
    if lat is not None and lon is not None:
        coordinate = Coordinate(lat=lat, lon=lon)
    interactive = not getattr(args, "no_prompt", False) and sys.stdin.isatty()
    return CliLocationPlatform(_state_store(settings), coordinate=coordinate, interactive=interactive)


def build_session(settings: Settings, args: argparse.Namespace) -> WaitSession:
    """Wire a session from settings + CLI arguments."""
    return WaitSession(
        settings,
        BackendClient(settings),
        GeoResolver(_platform(settings, args)),
        SelectionRepository(_state_store(settings)),
    )


def _dump(value: Any) -> None:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    print(json.dumps(value, ensure_ascii=False, indent=2))


def _print_notice(notice: Notice) -> None:
    """Print a notice; blocking ones wait for Enter when someone is at the terminal."""
    wait = notice.requires_ack and sys.stdin.isatty()
    suffix = " (press Enter to acknowledge)" if wait else ""
    print(f"[{notice.title}] {notice.message}{suffix}", file=sys.stderr)
    if wait:
        try:
            input()
        except EOFError:
            pass


def _print_context(ctx: AppContext) -> None:
    print(f"Region: {ctx.region or '-'}")
    print(f"Store:  {f'{ctx.store.name} ({ctx.store.id})' if ctx.store else '-'}")
    print(f"Date:   {ctx.date or '-'}")


def _print_snapshot(snapshot: QueueSnapshot) -> None:
    print(f"Current queue: {snapshot.current_queue_count}")
    print(f"Current wait:  {snapshot.current_wait_time}")
    print(f"Calls/min:     avg={snapshot.avg_calls} max={snapshot.max_calls}")
    print(f"New tickets/min: avg={snapshot.avg_new_tickets} max={snapshot.max_new_tickets}")


def _print_report(report: DiningReport) -> None:
    a = report.analysis
    s = report.suggestion
    print(f"{report.store.name} at {report.planned_time}")
    print(f"  Estimated draw time: {a.estimated_draw_time}")
    print(f"  Earliest / latest:   {a.earliest_draw_time} / {a.latest_draw_time}  ({a.sample_count} samples)")
    print(f"  Weekday / weekend:   {a.weekday_mean_draw_time or '-'} / {a.weekend_mean_draw_time or '-'}")
    print(f"  Wait: avg={s.avg_wait_minutes} min, queue ~{s.estimated_queue_count}")
    for line in s.message.splitlines():
        print(f"  {line}")
    if report.history:
        print("  History:")
        for r in report.history:
            print(
                f"    {r.date or '-'} {r.weekday_label or '  '} drawn={r.drawn_time or '-'} "
                f"wait={r.wait_minutes} [{r.confidence or '-'}]"
            )


def _cmd_start(args: argparse.Namespace) -> int:
    settings = get_settings()

    async def run() -> int:
        ctx, resolved = await build_session(settings, args).start()
        if args.json:
            _dump(
                {
                    "resolved": resolved.model_dump(mode="json"),
                    "region": ctx.region,
                    "store": ctx.store.model_dump(mode="json") if ctx.store else None,
                    "date": ctx.date,
                }
            )
            return 0
        print(f"Resolved region: {resolved.name or '-'} ({resolved.source})")
        _print_context(ctx)
        return 0

    return asyncio.run(run())


def _cmd_locate(args: argparse.Namespace) -> int:
    settings = get_settings()
    platform = _platform(settings, args)
    if args.allow:
        platform.set_permission(True)
    elif args.deny:
        platform.set_permission(False)
    elif args.forget:
        platform.set_permission(None)

    async def run() -> int:
        regions = await BackendClient(settings).get_regions()
        resolved = await GeoResolver(platform).resolve_default_region(regions, settings.selection.fallback_region)
        if args.json:
            _dump(resolved)
        else:
            distance = f" {resolved.distance_km:.1f} km" if resolved.distance_km is not None else ""
            print(f"{resolved.name or '-'} ({resolved.source}{distance})")
        return 0

    return asyncio.run(run())


def _cmd_regions(args: argparse.Namespace) -> int:
    settings = get_settings()
    regions = asyncio.run(BackendClient(settings).get_regions())
    if args.json:
        _dump({"regions": regions, "count": len(regions)})
    else:
        for r in regions:
            print(r)
    return 0


def _cmd_stores(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = build_session(settings, args)
    ctx = AppContext()
    asyncio.run(session.select_region(ctx, args.region))
    if args.json:
        _dump([s.model_dump(mode="json") for s in ctx.stores])
    else:
        for s in ctx.stores:
            print(f"{s.id}\t{s.name}")
    return 0


def _restore_store(ctx: AppContext, store_id: int | None) -> AppContext:
    if store_id is not None and (ctx.store is None or ctx.store.id != store_id):
        ctx.store = Store(id=store_id, name=str(store_id), region=ctx.region)
        ctx.date = None
    if ctx.store is None:
        raise ValueError("No store selected; pass --store-id")
    ctx.stores = [ctx.store]
    return ctx


def _cmd_dates(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = build_session(settings, args)
    ctx = _restore_store(SelectionRepository(_state_store(settings)).load(), args.store_id)
    asyncio.run(session.select_store(ctx, ctx.store.id, preferred_date=ctx.date))
    if args.json:
        _dump({"dates": ctx.dates, "count": len(ctx.dates), "selected": ctx.date})
    else:
        for d in ctx.dates:
            print(f"{d}{'  *' if d == ctx.date else ''}")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = build_session(settings, args)
    ctx = _restore_store(SelectionRepository(_state_store(settings)).load(), args.store_id)

    async def run() -> QueueSnapshot:
        if args.date or args.today or args.yesterday:
            await session.select_store(ctx, ctx.store.id, preferred_date=ctx.date)
            if args.today:
                session.select_relative_day(ctx, 0)
            elif args.yesterday:
                session.select_relative_day(ctx, 1)
            else:
                session.select_date(ctx, args.date)
        return await session.load_queue_snapshot(ctx)

    snapshot = asyncio.run(run())
    if args.json:
        _dump(snapshot)
    else:
        _print_context(ctx)
        _print_snapshot(snapshot)
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = build_session(settings, args)
    ctx = _restore_store(SelectionRepository(_state_store(settings)).load(), args.store_id)
    report = asyncio.run(session.analyze(ctx, args.time))
    if args.json:
        _dump(report)
    else:
        _print_report(report)
    return 0


def _cmd_ping(args: argparse.Namespace) -> int:
    result = asyncio.run(BackendClient(get_settings()).ping())
    if args.json:
        _dump(result)
    elif result["ok"]:
        print(f"OK {result['url']} ({result['elapsed_ms']} ms)")
    else:
        print(f"FAILED {result['url']}: {result['error'] or result['status_code']}")
    return 0 if result["ok"] else 1


def _add_location_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--lat", type=float, default=None)
    p.add_argument("--lon", type=float, default=None)
    p.add_argument("--no-prompt", action="store_true", help="Never ask for location permission.")


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the waitcast CLI."""
    parser = argparse.ArgumentParser(prog="waitcast")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Pick the default region (nearest to --lat/--lon) and store.")
    _add_location_args(start)
    start.add_argument("--json", action="store_true")
    start.set_defaults(func=_cmd_start)

    loc = sub.add_parser("locate", help="Resolve the supported region nearest to a coordinate.")
    _add_location_args(loc)
    perm = loc.add_mutually_exclusive_group()
    perm.add_argument("--allow", action="store_true", help="Record location permission as granted.")
    perm.add_argument("--deny", action="store_true", help="Record location permission as denied.")
    perm.add_argument("--forget", action="store_true", help="Forget the recorded permission decision.")
    loc.add_argument("--json", action="store_true")
    loc.set_defaults(func=_cmd_locate)

    reg = sub.add_parser("regions", help="List supported regions.")
    reg.add_argument("--json", action="store_true")
    reg.set_defaults(func=_cmd_regions)

    st = sub.add_parser("stores", help="List stores in a region (and remember the region).")
    st.add_argument("region")
    st.add_argument("--json", action="store_true")
    st.set_defaults(func=_cmd_stores)

    dt = sub.add_parser("dates", help="List dates with data for a store.")
    dt.add_argument("--store-id", type=int, default=None, help="Defaults to the last selected store.")
    dt.add_argument("--json", action="store_true")
    dt.set_defaults(func=_cmd_dates)

    stats = sub.add_parser("stats", help="Queue statistics for a store and date.")
    stats.add_argument("--store-id", type=int, default=None, help="Defaults to the last selected store.")
    day = stats.add_mutually_exclusive_group()
    day.add_argument("--date", default=None, help="YYYY-MM-DD; defaults to the last selected date.")
    day.add_argument("--today", action="store_true")
    day.add_argument("--yesterday", action="store_true")
    stats.add_argument("--json", action="store_true")
    stats.set_defaults(func=_cmd_stats)

    an = sub.add_parser("analyze", help="Estimate draw time and wait for a planned visit time.")
    an.add_argument("--time", required=True, help="Planned visit time HH:MM (business hours only).")
    an.add_argument("--store-id", type=int, default=None, help="Defaults to the last selected store.")
    an.add_argument("--json", action="store_true")
    an.set_defaults(func=_cmd_analyze)

    ping = sub.add_parser("ping", help="Check that the backend is reachable.")
    ping.add_argument("--json", action="store_true")
    ping.set_defaults(func=_cmd_ping)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m waitcast.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (LookupError, ValueError) as e:
        print(f"[Attention] {e}", file=sys.stderr)
        return 2
    except WaitcastError as e:
        notice = notice_for_error(e)
        _print_notice(notice)
        return 0 if notice.tone == "success" else 1


if __name__ == "__main__":
    raise SystemExit(main())
