"""Command-line interface for the rota engine."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import date

from rota.ai.cp_sat_planner import CPSatPlanner
from rota.config import RotaConfig, load_config
from rota.domain.db import get_session, init_database
from rota.engine.bulk import BulkGenerationAdapter
from rota.engine.rules import AssignmentEngine, EngineContext, shared_secret_authorizer
from rota.exceptions import GenerationError
from rota.io.export_csv import export_report_csv
from rota.io.import_csv import import_employees_csv, import_locations_csv, import_shifts_csv
from rota.services.calendar import week_label, week_start
from rota.services.hours import hours_summary, summarize_hours
from rota.services.reports import build_report, format_board
from rota.session_state import SessionState
from rota.store.backend import SqlAlchemyBackend
from rota.store.entity_store import EntityStore


@dataclass
class Runtime:
    cfg: RotaConfig
    state: SessionState
    store: EntityStore
    engine: AssignmentEngine


def _load(args: argparse.Namespace) -> RotaConfig:
    cfg = load_config(args.config)
    if args.db:
        cfg.db_url = args.db
    return cfg


async def _runtime(args: argparse.Namespace) -> Runtime:
    cfg = _load(args)
    state = SessionState(cfg.state_path)
    backend = SqlAlchemyBackend(cfg.db_url) if cfg.persistence_configured else None
    store = EntityStore(backend)
    await store.bootstrap()
    context = EngineContext(privileged=state.privileged)
    if cfg.clear_secret:
        context.authorize_clear = shared_secret_authorizer(cfg.clear_secret)
    return Runtime(cfg=cfg, state=state, store=store, engine=AssignmentEngine(store, context))


def _week(value: str | None) -> date:
    return week_start(value or date.today())


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    cfg = _load(args)
    if not cfg.persistence_configured:
        raise SystemExit("[ERROR] No database configured (use --db or ROTA_DB_URL)")
    init_database(cfg.db_url)


def _cmd_seed(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        if rt.store.local_only:
            raise SystemExit("[ERROR] Seeding needs a reachable database")
        if rt.store.locations:
            raise SystemExit("[ERROR] Database already has data; refusing to seed")
        mutations = await rt.store.seed()
        if all(m.confirmed for m in mutations):
            print("[OK] Demo data uploaded")

    asyncio.run(run())


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    cfg = _load(args)
    if not cfg.persistence_configured:
        raise SystemExit("[ERROR] No database configured (use --db or ROTA_DB_URL)")
    session = get_session(cfg.db_url)
    try:
        if args.locations:
            import_locations_csv(session, args.locations)
        if args.employees:
            import_employees_csv(session, args.employees)
        if args.shifts:
            import_shifts_csv(session, args.shifts)
        print("[OK] CSV import complete")
    except Exception as e:
        session.rollback()
        print(f"[ERROR] Import failed: {e}")
        raise
    finally:
        session.close()


def _cmd_login(args: argparse.Namespace) -> None:
    cfg = _load(args)
    state = SessionState(cfg.state_path)
    if state.login(args.password, cfg):
        print("[OK] Logged in")
    else:
        print("[ERROR] Incorrect password")


def _cmd_logout(args: argparse.Namespace) -> None:
    cfg = _load(args)
    SessionState(cfg.state_path).logout()
    print("[OK] Logged out")


def _cmd_assign(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        created = await rt.engine.assign(args.date, args.employee, args.shift, args.location)
        if created is not None:
            print(f"[OK] Assigned {created.id} at location '{created.location_id}'")

    asyncio.run(run())


def _cmd_remove(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        mutation = await rt.engine.remove(args.id)
        if mutation is not None and mutation.confirmed:
            print(f"[OK] Removed {args.id}")

    asyncio.run(run())


def _cmd_relocate(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        moved = await rt.engine.relocate(args.id, args.location)
        if moved is not None:
            print(f"[OK] Moved {moved.id} to '{moved.location_id}'")

    asyncio.run(run())


def _cmd_clear_week(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        start = _week(args.week)
        removed = await rt.engine.clear_week(start, args.confirm)
        print(f"[OK] Cleared {removed} assignments for {week_label(start)}")

    asyncio.run(run())


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate a week of assignments with the CP-SAT planner."""
    async def run() -> None:
        rt = await _runtime(args)
        adapter = BulkGenerationAdapter(rt.engine, CPSatPlanner(rt.cfg.planner))
        start = _week(args.week)
        try:
            added = await adapter.generate_week(args.constraints or "", start)
        except GenerationError as e:
            raise SystemExit(f"[ERROR] {e}")
        print(f"[OK] Added {len(added)} assignments for {week_label(start)}")

    asyncio.run(run())


def _cmd_hours(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        print(summarize_hours(hours_summary(rt.store)))

    asyncio.run(run())


def _cmd_report(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        report = build_report(
            rt.store,
            args.start,
            args.end,
            search=args.search,
            location_name=args.location,
            max_days=rt.cfg.max_range_days,
        )
        if args.out is not None:
            export_report_csv(report, args.out or rt.cfg.export_dir, args.start, args.end)
        elif report.empty:
            print("No assignments.")
        else:
            print(report.drop(columns=["assignment_id"]).to_string(index=False))

    asyncio.run(run())


def _cmd_board(args: argparse.Namespace) -> None:
    async def run() -> None:
        rt = await _runtime(args)
        start = _week(args.week)
        print(week_label(start))
        print(format_board(rt.store, start))

    asyncio.run(run())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="rota")
    parser.add_argument("--config", default=None, help="JSON or YAML config file")
    parser.add_argument("--db", default=None, help="Database URL (overrides config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create database tables")
    p.set_defaults(func=_cmd_init_db)

    p = sub.add_parser("seed", help="Upload demo locations, employees and shifts")
    p.set_defaults(func=_cmd_seed)

    p = sub.add_parser("import-csv", help="Import reference data from CSV files")
    p.add_argument("--locations")
    p.add_argument("--employees")
    p.add_argument("--shifts")
    p.set_defaults(func=_cmd_import_csv)

    p = sub.add_parser("login", help="Switch to administrator mode")
    p.add_argument("--password", required=True)
    p.set_defaults(func=_cmd_login)

    p = sub.add_parser("logout", help="Leave administrator mode")
    p.set_defaults(func=_cmd_logout)

    p = sub.add_parser("assign", help="Assign an employee to a shift")
    p.add_argument("--date", required=True)
    p.add_argument("--employee", required=True)
    p.add_argument("--shift", required=True)
    p.add_argument("--location")
    p.set_defaults(func=_cmd_assign)

    p = sub.add_parser("remove", help="Remove an assignment")
    p.add_argument("--id", required=True)
    p.set_defaults(func=_cmd_remove)

    p = sub.add_parser("relocate", help="Move an assignment to another location")
    p.add_argument("--id", required=True)
    p.add_argument("--location", required=True)
    p.set_defaults(func=_cmd_relocate)

    p = sub.add_parser("clear-week", help="Remove every assignment in a week")
    p.add_argument("--week", help="Any date in the week (default: this week)")
    p.add_argument("--confirm", help="Confirmation phrase, when one is configured")
    p.set_defaults(func=_cmd_clear_week)

    p = sub.add_parser("generate", help="Fill a week using the CP-SAT planner")
    p.add_argument("--week", help="Any date in the week (default: this week)")
    p.add_argument("--constraints", default="")
    p.set_defaults(func=_cmd_generate)

    p = sub.add_parser("hours", help="Worked hours against target per employee")
    p.set_defaults(func=_cmd_hours)

    p = sub.add_parser("report", help="Assignments in a date range")
    p.add_argument("--from", dest="start", required=True)
    p.add_argument("--to", dest="end", required=True)
    p.add_argument("--search")
    p.add_argument("--location")
    p.add_argument("--out", nargs="?", const="", default=None, help="Export CSV into this directory")
    p.set_defaults(func=_cmd_report)

    p = sub.add_parser("board", help="Who works where, per location and day")
    p.add_argument("--week", help="Any date in the week (default: this week)")
    p.set_defaults(func=_cmd_board)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
