from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: Optional[str] = "training_attendance"

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", cls.host)),
            port=int(db_config.get("port", cls.port)),
            user=str(db_config.get("user", cls.user)),
            password=str(db_config.get("password", cls.password)),
            database=db_config.get("database", cls.database),
        )

    def server_only(self) -> "DBConfig":
        """Same server and credentials, no default schema (for CREATE DATABASE)."""
        return replace(self, database=None)

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database or ''}"


class DatabaseConnection:
    """Opens one short-lived connection per repository call.

    Vietnamese names and notes need utf8mb4 on the wire as well as in the tables.
    """

    def __init__(self, config: DBConfig):
        self.config = config

    @classmethod
    def from_settings(cls, db_config: dict) -> "DatabaseConnection":
        return cls(DBConfig.from_dict(db_config))

    def connect(self):
        kwargs = dict(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            password=self.config.password,
            charset="utf8mb4",
            collation="utf8mb4_unicode_ci",
            use_pure=True,
        )
        if self.config.database:
            kwargs["database"] = self.config.database
        return mysql.connector.connect(**kwargs)
