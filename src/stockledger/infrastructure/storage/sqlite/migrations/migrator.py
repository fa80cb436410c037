"""
Versioned schema migrations for the ledger database.

Migration files are named ``v<NNN>_<name>.sql`` and live next to this
module. Each applied file is recorded in ``schema_migrations`` together
with a checksum; an applied file whose content later changes halts the
run instead of being re-applied.

``verify_schema_integrity`` goes beyond SQLite's own checks: it confirms
the append-only triggers are still installed and that every material's
cached stock equals the sum of its movements.
"""

import argparse
import asyncio
import hashlib
import re
import shutil
import time
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.infrastructure.storage.sqlite.connection import open_ledger_connection

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")
_MIGRATION_BUSY_TIMEOUT = 5000

REQUIRED_TABLES = (
    "materials",
    "inventory_movements",
    "reorder_requests",
    "schema_migrations",
)

REQUIRED_TRIGGERS = (
    "trg_movements_no_update",
    "trg_movements_no_delete",
)


@dataclass
class MigrationInfo:
    """One migration file on disk."""

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
        return cls(version=match[1], name=match[2], path=path, checksum=digest[:16])


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("migration_file_skipped", path=str(path), error=str(e))
    return found


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> recorded checksum. Empty before the first migration."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    """Run one migration script and record it. Failures are returned, not raised."""
    logger.info("migration_started", version=migration.version, name=migration.name)
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations "
            "(version, name, checksum, execution_time_ms) VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, _elapsed_ms(started), error=str(e)
        )

    elapsed = _elapsed_ms(started)
    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating it."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def _apply_pending(conn: aiosqlite.Connection) -> list[MigrationResult]:
    applied = await get_applied_migrations(conn)
    results: list[MigrationResult] = []

    for migration in discover_migrations():
        recorded = applied.get(migration.version)
        if recorded is not None:
            if recorded != migration.checksum:
                logger.error(
                    "migration_checksum_changed",
                    version=migration.version,
                    recorded=recorded,
                    found=migration.checksum,
                )
                break
            continue

        result = await apply_migration(conn, migration)
        results.append(result)
        if not result.success:
            break

        violations = await _foreign_key_violations(conn)
        if violations:
            logger.error(
                "migration_left_foreign_key_violations",
                version=migration.version,
                violations=violations,
            )
            break

    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the newest schema.

    Args:
        db_path: Database file (default: ``StorageSettings.db_path``)
        create_backup_before: Copy an existing file aside first; the copy is
            removed again when every pending migration succeeds

    Returns:
        One result per migration attempted; already-applied ones are omitted
    """
    if db_path is None:
        db_path = get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("database_migration_run", db_path=str(db_path))

    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    try:
        conn = await open_ledger_connection(db_path, _MIGRATION_BUSY_TIMEOUT)
        try:
            results = await _apply_pending(conn)
        finally:
            await conn.close()
    except Exception as e:
        logger.error("database_migration_run_failed", error=str(e))
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Applied and pending versions for the database file."""
    if db_path is None:
        db_path = get_settings().storage.db_path
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


async def _stock_drift(conn: aiosqlite.Connection) -> list[dict]:
    """Materials whose cached stock differs from the sum of their movements."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    cursor = await conn.execute("SELECT material_id, quantity FROM inventory_movements")
    async for material_id, quantity in cursor:
        totals[material_id] += Decimal(quantity)

    drifted = []
    cursor = await conn.execute("SELECT id, current_stock FROM materials ORDER BY id")
    async for material_id, cached in cursor:
        ledger = totals.get(material_id, Decimal("0"))
        if Decimal(cached) != ledger:
            drifted.append(
                {"material_id": material_id, "cached": cached, "ledger": format(ledger, "f")}
            )
    return drifted


def _check(name: str, passed: bool, **details) -> dict:
    return {"check": name, "status": "PASS" if passed else "FAIL", **details}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Structural and ledger-level checks on a migrated database.

    Returns:
        One dict per check with ``check``, ``status`` (PASS/FAIL) and details
    """
    if db_path is None:
        db_path = get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        objects = await cursor.fetchall()
        tables = {name for kind, name in objects if kind == "table"}
        triggers = {name for kind, name in objects if kind == "trigger"}
        missing_tables = [t for t in REQUIRED_TABLES if t not in tables]
        missing_triggers = [t for t in REQUIRED_TRIGGERS if t not in triggers]

        checks = [
            _check("foreign_keys", violations == 0, violations=violations),
            _check("integrity", integrity == "ok", result=integrity),
            _check("required_tables", not missing_tables, missing=missing_tables),
            _check("append_only_triggers", not missing_triggers, missing=missing_triggers),
        ]
        if not missing_tables:
            drifted = await _stock_drift(conn)
            checks.append(_check("stock_matches_ledger", not drifted, drifted=drifted))

    return checks


def _print_status(status: dict) -> None:
    print(f"Database exists: {status['exists']}")
    print(f"Current version: {status.get('current_version') or 'N/A'}")
    print(f"Applied migrations: {status['applied_migrations']}")
    print(f"Pending migrations: {status['pending_migrations']}")


def _print_checks(checks: list[dict]) -> bool:
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
        if check["status"] != "PASS":
            for key, value in check.items():
                if key not in ("check", "status"):
                    print(f"       {key}: {value}")
    return all(c["status"] == "PASS" for c in checks)


def _print_results(results: list[MigrationResult]) -> bool:
    if not results:
        print("Schema is up to date.")
    for result in results:
        outcome = "SUCCESS" if result.success else "FAILED"
        print(f"[{outcome}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    return all(r.success for r in results)


def main() -> None:
    """``stockledger-migrate`` entry point."""
    parser = argparse.ArgumentParser(description="Stock ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument(
        "--verify",
        action="store_true",
        help="Check schema integrity and that cached stock matches the ledger",
    )
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    args = parser.parse_args()

    if args.status:
        _print_status(asyncio.run(get_migration_status(args.db_path)))
        return

    if args.verify:
        ok = _print_checks(asyncio.run(verify_schema_integrity(args.db_path)))
    else:
        ok = _print_results(
            asyncio.run(
                initialize_database(args.db_path, create_backup_before=not args.no_backup)
            )
        )
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
