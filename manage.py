#!/usr/bin/env python3
"""
Inventory ledger management CLI.

Usage:
    python manage.py migrate       Apply pending database migrations
    python manage.py status        Show migration status
    python manage.py verify        Verify schema integrity
    python manage.py reconcile     Replay ledgers and compare with cached stock
    python manage.py alerts        List consumables at or below minimum stock
"""

import argparse
import asyncio
import sys
from pathlib import Path

PAGE_SIZE = 200


def cmd_migrate(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(
        initialize_database(args.db_path, create_backup_before=not args.no_backup)
    )
    if not results:
        print("Database is up to date.")
        return

    failed = False
    for result in results:
        state = "OK" if result.success else "FAILED"
        print(f"[{state}] v{result.version}_{result.name} ({result.execution_time_ms} ms)")
        if result.error:
            print(f"  {result.error}")
            failed = True
    if failed:
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status(args.db_path))
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version', 'N/A')}")
    print(f"Applied migrations: {status.get('applied_migrations', [])}")
    print(f"Pending migrations: {status.get('pending_migrations', [])}")


def cmd_verify(args: argparse.Namespace) -> None:
    from src.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    checks = asyncio.run(verify_schema_integrity(args.db_path))
    failed = False
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check["status"] != "PASS":
            details = {k: v for k, v in check.items() if k not in ("check", "status")}
            print(f"  {details}")
            failed = True
    if failed:
        sys.exit(1)


async def _item_ids(inventory) -> list[int]:
    from src.core.entities.inventory import ItemQuery

    ids: list[int] = []
    for deleted_only in (False, True):
        offset = 0
        while True:
            page = await inventory.list_items(
                ItemQuery(deleted_only=deleted_only, limit=PAGE_SIZE, offset=offset)
            )
            ids.extend(item.id for item in page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
    return ids


async def _reconcile(item_ids: list[int]) -> int:
    from src.application.services import get_inventory_service, get_movement_service
    from src.infrastructure.storage.sqlite import close_pool

    try:
        movements = await get_movement_service()
        if not item_ids:
            item_ids = await _item_ids(await get_inventory_service())

        mismatches = 0
        for item_id in item_ids:
            result = await movements.reconcile(item_id)
            if result.consistent:
                continue
            mismatches += 1
            print(
                f"Item {item_id}: cached {result.cached_stock:g}, "
                f"ledger {result.ledger_stock:g} ({result.entries} entries)"
            )
        print(f"Checked {len(item_ids)} items, {mismatches} mismatched.")
        return mismatches
    finally:
        await close_pool()


def cmd_reconcile(args: argparse.Namespace) -> None:
    if asyncio.run(_reconcile(args.item_ids)):
        sys.exit(1)


async def _alerts() -> None:
    from src.application.use_cases import InventoryStatusUseCase
    from src.infrastructure.storage.sqlite import close_pool

    try:
        use_case = InventoryStatusUseCase()
        items = await use_case.execute(alerts_only=True)
        for item in items:
            print(
                f"{item.id:>6}  {item.name:<40} available {item.available_usage:g} "
                f"{item.usage_unit} (min {item.min_stock:g})"
            )
        print(f"{len(items)} items need restocking.")
    finally:
        await close_pool()


def cmd_alerts(args: argparse.Namespace) -> None:
    asyncio.run(_alerts())


def main() -> None:
    from src.config import configure_logging

    parser = argparse.ArgumentParser(
        description="Inventory ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_status.set_defaults(func=cmd_status)

    # verify
    p_verify = sub.add_parser("verify", help="Verify schema integrity")
    p_verify.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_verify.set_defaults(func=cmd_verify)

    # reconcile
    p_reconcile = sub.add_parser("reconcile", help="Compare cached stock with ledger replay")
    p_reconcile.add_argument("item_ids", nargs="*", type=int, help="Items to check (default: all)")
    p_reconcile.set_defaults(func=cmd_reconcile)

    # alerts
    p_alerts = sub.add_parser("alerts", help="List low-stock consumables")
    p_alerts.set_defaults(func=cmd_alerts)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
