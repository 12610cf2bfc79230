from __future__ import annotations

from datetime import time, timedelta

from training_attendance.database.bootstrap import split_sql_script
from training_attendance.database.mysql_base import in_clause, normalize_mysql_time


def test_split_sql_script_drops_database_directives_and_comments():
    script = """CREATE DATABASE IF NOT EXISTS training_attendance CHARACTER SET utf8mb4;
USE training_attendance;

-- classes
CREATE TABLE training_classes (
  class_id INT PRIMARY KEY
) ENGINE=InnoDB;

INSERT IGNORE INTO training_classes (class_id) VALUES (1);
"""

    statements = list(split_sql_script(script))

    assert statements == [
        "CREATE TABLE training_classes (\n  class_id INT PRIMARY KEY\n) ENGINE=InnoDB",
        "INSERT IGNORE INTO training_classes (class_id) VALUES (1)",
    ]


def test_normalize_mysql_time_accepts_connector_shapes():
    assert normalize_mysql_time(timedelta(hours=9, minutes=30)) == time(9, 30)
    assert normalize_mysql_time("13:05:00") == time(13, 5)
    assert normalize_mysql_time(time(7, 0)) == time(7, 0)
    assert normalize_mysql_time(None) is None


def test_in_clause_placeholders():
    assert in_clause([1, 2, 3]) == "%s, %s, %s"
