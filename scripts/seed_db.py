from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from dotenv import load_dotenv

from config import get_settings_module

from training_attendance.database.bootstrap import apply_seed_sql
from training_attendance.database.connection import DBConfig


def main() -> None:
    load_dotenv(REPO_ROOT / ".env", override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    statements = apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    print(f"Demo classes and students seeded into {DBConfig.from_dict(db_config).describe()} ({statements} statements)")


if __name__ == "__main__":
    main()
