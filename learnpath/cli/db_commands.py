"""
Database CLI commands: init, verify
"""
import asyncio

from sqlalchemy import inspect


class DbCommand:
    """Database CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        """Execute database command."""
        if args.db_action == "init":
            return self._init()
        elif args.db_action == "verify":
            return self._verify()
        else:
            print("Error: Unknown database action (expected: init, verify)")
            return 1

    def _init(self) -> int:
        """Create all tables that do not exist yet."""
        from learnpath.database import DATABASE_URL, close_db, init_db

        print("=== Database Initialization ===")
        if self.dry_run:
            print(f"[DRY RUN] Would create missing tables on {DATABASE_URL.split('@')[-1]}")
            return 0

        async def run():
            try:
                await init_db()
            finally:
                await close_db()

        try:
            asyncio.run(run())
        except Exception as e:
            print(f"Initialization failed: {e}")
            return 1

        print("✓ Tables created")
        return 0

    def _verify(self) -> int:
        """Compare the live schema against the ORM metadata."""
        from learnpath.database import close_db, engine
        from learnpath.orm.base import Base

        print("=== Database Verification ===")
        expected = sorted(Base.metadata.tables)

        async def run():
            try:
                async with engine.connect() as conn:
                    return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            finally:
                await close_db()

        try:
            existing = set(asyncio.run(run()))
        except Exception as e:
            print(f"Verification failed: {e}")
            return 1

        missing = [table for table in expected if table not in existing]
        for table in expected:
            mark = "✗" if table in missing else "✓"
            print(f"  {mark} {table}")

        if missing:
            print(f"Missing tables: {', '.join(missing)} (run: learnpath db init)")
            return 1
        return 0
