"""Apply database/schema.sql and database/seed.sql to the configured server."""
from __future__ import annotations

import logging
from contextlib import closing
from pathlib import Path
from typing import Iterator, Union

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _config(db_config: dict) -> DBConfig:
    return DBConfig.from_dict({"host": "localhost", "user": "root", "password": "", "database": "quota_db", **db_config})


def _connect(config: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": config.host,
        "port": config.port,
        "user": config.user,
        "password": config.password,
        "connection_timeout": config.connect_timeout,
    }
    if with_database:
        kwargs["database"] = config.database
    return mysql.connector.connect(**kwargs)


def split_statements(sql: str) -> Iterator[str]:
    """Yield statements separated by ';' outside single-quoted literals.

    Full-line ``--`` comments are dropped first.
    """

    text = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    buf: list[str] = []
    quoted = False
    for ch in text:
        if ch == "'":
            quoted = not quoted
        if ch == ";" and not quoted:
            stmt = "".join(buf).strip()
            if stmt:
                yield stmt
            buf = []
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql_file(db_config: dict, path: Path) -> int:
    statements = list(split_statements(path.read_text(encoding="utf-8")))
    with closing(_connect(_config(db_config))) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    return len(statements)


def ensure_database_exists(db_config: dict) -> None:
    config = _config(db_config)
    with closing(_connect(config, with_database=False)) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: PathLike) -> None:
    ensure_database_exists(db_config)
    count = _exec_sql_file(db_config, Path(schema_path))
    logger.info("Applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: PathLike) -> None:
    count = _exec_sql_file(db_config, Path(seed_path))
    logger.info("Applied seed %s (%d statements)", seed_path, count)


def list_tables(db_config: dict) -> list[str]:
    with closing(_connect(_config(db_config))) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
