"""
Versioned schema migrations for the inventory database.

Migration files are named vNNN_name.sql and applied in version order. Each
applied file is recorded in schema_migrations with its checksum; a file whose
checksum no longer matches its recorded one halts the run. After every
migration the ledger tables must still carry their append-only triggers.
The database file is backed up before a run and restored if the run fails.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "warehouses",
    "suppliers",
    "categories",
    "inventory_items",
    "inventory_movements",
    "reservations",
    "asset_usage_records",
    "schema_migrations",
]

# Trigger name -> table it protects
REQUIRED_TRIGGERS = {
    "trg_inventory_movements_no_update": "inventory_movements",
    "trg_inventory_movements_no_delete": "inventory_movements",
    "trg_asset_usage_no_update": "asset_usage_records",
    "trg_asset_usage_no_delete": "asset_usage_records",
    "trg_inventory_items_no_delete": "inventory_items",
    "trg_reservations_terminal": "reservations",
}


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _resolve_db_path(db_path: Path | None) -> Path:
    return db_path or get_settings().storage.db_path


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _check(name: str, passed: bool, **details: Any) -> dict[str, Any]:
    return {"check": name, "status": "PASS" if passed else "FAIL", **details}


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        # Fresh database, table not created yet
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


async def _schema_objects(conn: aiosqlite.Connection) -> tuple[set[str], set[str]]:
    """Names of existing tables and triggers."""
    cursor = await conn.execute(
        "SELECT type, name FROM sqlite_master WHERE type IN ('table', 'trigger')"
    )
    rows = await cursor.fetchall()
    tables = {name for kind, name in rows if kind == "table"}
    triggers = {name for kind, name in rows if kind == "trigger"}
    return tables, triggers


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    migrations = []
    for path in migrations_dir.glob("v*.sql"):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(migrations, key=lambda m: int(m.version))


async def _missing_ledger_triggers(conn: aiosqlite.Connection) -> list[str]:
    """Required triggers absent although the table they protect exists."""
    tables, triggers = await _schema_objects(conn)
    return [
        trigger
        for trigger, table in REQUIRED_TRIGGERS.items()
        if table in tables and trigger not in triggers
    ]


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=_elapsed_ms(started),
            error=str(e),
        )

    result = MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=_elapsed_ms(started),
    )

    missing = await _missing_ledger_triggers(conn)
    if missing:
        result.success = False
        result.error = f"ledger triggers missing after migration: {', '.join(missing)}"
        logger.error("ledger_triggers_missing", version=migration.version, missing=missing)
    else:
        logger.info(
            "migration_applied",
            version=migration.version,
            name=migration.name,
            execution_time_ms=result.execution_time_ms,
        )
    return result


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{timestamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.info("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Back up an existing file first

    Returns:
        Results for the migrations attempted, empty when up to date
    """
    db_path = _resolve_db_path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            applied = await get_applied_migrations(conn)
            for migration in discover_migrations():
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    logger.error(
                        "migration_checksum_mismatch",
                        version=migration.version,
                        recorded=recorded,
                        found=migration.checksum,
                    )
                    break

                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

        if backup_path and all(r.success for r in results):
            backup_path.unlink()
            logger.info("backup_cleaned_up")

    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    return results


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    """Current version plus applied and pending migration versions."""
    db_path = _resolve_db_path(db_path)
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """
    Check foreign keys, page integrity, required tables and ledger triggers.

    Returns:
        One dict per check with "check", "status" (PASS/FAIL) and details
    """
    db_path = _resolve_db_path(db_path)

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        tables, triggers = await _schema_objects(conn)

    missing_tables = [t for t in REQUIRED_TABLES if t not in tables]
    missing_triggers = [t for t in REQUIRED_TRIGGERS if t not in triggers]

    return [
        _check("foreign_keys", not fk_violations, violations=len(fk_violations)),
        _check("integrity", integrity == "ok", result=integrity),
        _check("required_tables", not missing_tables, missing=missing_tables),
        _check("immutability_triggers", not missing_triggers, missing=missing_triggers),
    ]
