"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert info.path == migration_file
        assert len(info.checksum) == 16  # First 16 chars of SHA-256

    def test_from_file_invalid_name(self, tmp_path: Path):
        bad = tmp_path / "initial.sql"
        bad.write_text("SELECT 1;")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(bad)


class TestDiscoverMigrations:
    def test_bundled_migrations(self):
        migrations = discover_migrations()
        assert [m.version for m in migrations][0] == "001"
        assert migrations[0].name == "inventory"

    def test_sorted_and_skips_invalid(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vx_broken.sql").write_text("SELECT 3;")

        migrations = discover_migrations(tmp_path)

        assert [m.version for m in migrations] == ["001", "002"]


class TestInitializeDatabase:
    async def test_creates_schema(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert len(results) == 1
        assert results[0].success

        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert set(REQUIRED_TABLES) <= tables
            assert await get_current_version(conn) == "001"
            applied = await get_applied_migrations(conn)
            assert list(applied) == ["001"]

    async def test_is_idempotent(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        results = await initialize_database(temp_db_path, create_backup_before=False)
        assert results == []

    async def test_backup_removed_after_success(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        await initialize_database(temp_db_path)
        backups = list(temp_db_path.parent.glob("*.backup_*"))
        assert backups == []


class TestStatusAndVerify:
    async def test_status_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")
        assert status["exists"] is False
        assert status["pending_migrations"] == ["001"]

    async def test_status_after_migration(self, migrated_db: Path):
        status = await get_migration_status(migrated_db)
        assert status["exists"] is True
        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []

    async def test_verify_passes(self, migrated_db: Path):
        checks = await verify_schema_integrity(migrated_db)
        assert {c["check"] for c in checks} == {
            "foreign_keys",
            "integrity",
            "required_tables",
            "immutability_triggers",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_verify_flags_missing_trigger(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute("DROP TRIGGER trg_inventory_movements_no_update")
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(migrated_db)}

        assert checks["immutability_triggers"]["status"] == "FAIL"
        assert checks["immutability_triggers"]["missing"] == ["trg_inventory_movements_no_update"]


class TestBackup:
    def test_create_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "data.db"
        db_path.write_bytes(b"original")

        backup = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup)

        assert db_path.read_bytes() == b"original"
