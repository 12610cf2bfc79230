from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Union

from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor

logger = logging.getLogger(__name__)

# schema.sql/seed.sql name the default database; the configured one wins.
_DATABASE_DIRECTIVE = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def split_sql_script(sql: str) -> Iterator[str]:
    """Yield statements from a schema or seed script.

    Statements end with a line whose last character is ';'. Comment lines and the
    script's own CREATE DATABASE/USE directives are dropped.
    """

    lines: list[str] = []
    for raw in sql.splitlines():
        line = raw.rstrip()
        if not lines and (not line.strip() or line.lstrip().startswith("--")):
            continue
        lines.append(line)
        if line.endswith(";"):
            statement = "\n".join(lines).rstrip(";").strip()
            lines = []
            if not _DATABASE_DIRECTIVE.match(statement):
                yield statement

    leftover = "\n".join(lines).strip()
    if leftover and not _DATABASE_DIRECTIVE.match(leftover):
        yield leftover


def _run_script(config: DBConfig, path: Path) -> int:
    count = 0
    with db_cursor(DatabaseConnection(config), dictionary=False) as (_, cur):
        for statement in split_sql_script(path.read_text(encoding="utf-8")):
            cur.execute(statement)
            count += 1
    logger.info("Applied %s (%d statements) to %s", path.name, count, config.describe())
    return count


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    with db_cursor(DatabaseConnection(config.server_only()), dictionary=False) as (_, cur):
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> int:
    ensure_database_exists(db_config)
    return _run_script(DBConfig.from_dict(db_config), Path(schema_path))


def apply_seed_sql(db_config: dict, *, seed_path: Union[str, Path]) -> int:
    return _run_script(DBConfig.from_dict(db_config), Path(seed_path))


def list_tables(db_config: dict) -> list[str]:
    with db_cursor(DatabaseConnection.from_settings(db_config), dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
