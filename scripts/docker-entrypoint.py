#!/usr/bin/env python3
"""Docker entrypoint for the API container.

Waits for the database, applies Alembic migrations, then execs the given command.
On PostgreSQL an advisory lock keeps concurrent containers from migrating at once.

Usage:
    python scripts/docker-entrypoint.py uvicorn app.main:app --host 0.0.0.0 --port 8000
"""

import os
import sys
import time
from pathlib import Path

# PostgreSQL advisory lock ID for migrations (fixed value)
MIGRATION_LOCK_ID = 731_500_215

REPO_ROOT = Path(__file__).resolve().parent.parent


def wait_for_database(max_attempts=30, delay=1):
    """Return True once `SELECT 1` succeeds, False after max_attempts failures."""
    from sqlalchemy import text
    from app.db import engine

    print("Waiting for database...")
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            print(f"Database is ready (attempt {attempt}/{max_attempts})")
            return True
        except Exception as e:
            if attempt == max_attempts:
                print(f"ERROR: database not ready after {max_attempts} attempts: {e}")
                return False
            time.sleep(delay)
    return False


def run_migrations():
    """Run `alembic upgrade head`, holding the advisory lock on PostgreSQL."""
    from alembic import command
    from alembic.config import Config
    from sqlalchemy import text
    from app.db import engine

    if not wait_for_database():
        return False

    alembic_cfg = Config(str(REPO_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(REPO_ROOT / "alembic"))

    use_lock = engine.dialect.name == "postgresql"
    with engine.connect() as conn:
        if use_lock:
            print(f"Acquiring migration lock (ID: {MIGRATION_LOCK_ID})...")
            conn.execute(text(f"SELECT pg_advisory_lock({MIGRATION_LOCK_ID})"))
        try:
            print("Running alembic upgrade head...")
            command.upgrade(alembic_cfg, "head")
            print("Migration success")
            return True
        except Exception as e:
            print(f"ERROR: Migrations failed: {e}")
            return False
        finally:
            if use_lock:
                conn.execute(text(f"SELECT pg_advisory_unlock({MIGRATION_LOCK_ID})"))
                print("Released migration lock")


def main():
    print("=== Docker Entrypoint: Starting People Service ===")

    if not run_migrations():
        print("ERROR: Migrations failed. Exiting without starting the server.")
        sys.exit(1)

    if len(sys.argv) > 1:
        print(f"=== Executing: {' '.join(sys.argv[1:])} ===")
        os.execvp(sys.argv[1], sys.argv[1:])
    else:
        print("ERROR: No command provided, exiting")
        sys.exit(1)


if __name__ == "__main__":
    main()
