#!/usr/bin/env python3
"""Load the YAML user/department seed into the Postgres directory tables.

Usage:
    SMARTCITY_DB_DATABASE_URL=postgresql+asyncpg://... python3 scripts/seed_directory_db.py

Re-running is safe: users and departments are upserted by id.
"""

import asyncio
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from smartcity.core.config import Settings
from smartcity.db.engine import DatabaseManager
from smartcity.directory.store import DirectoryStore
from smartcity.repositories.postgres.directory import PostgresDirectoryRepository


async def main():
    settings = Settings()
    if not settings.db.database_url:
        print("SMARTCITY_DB_DATABASE_URL is not set; nothing to seed.")
        return

    seed = DirectoryStore(seed_path=_project_root / settings.directory.seed_path, load_seed=True)
    db = DatabaseManager.from_config(settings.db)
    repo = PostgresDirectoryRepository(db)
    try:
        users = [await repo.save_user(u) for u in seed.list_users()]
        departments = [await repo.save_department(d) for d in seed.list_departments()]
    finally:
        await db.close()

    print(f"Seeded {len(users)} users and {len(departments)} departments.")


if __name__ == "__main__":
    asyncio.run(main())
