from .migrations import setupDB
from .schema import schema

import os
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from urllib.parse import urlparse

from retry import retry

from enum import StrEnum, auto
import sqlite3, pymysql, pymysql.cursors, psycopg2, psycopg2.extras

from typing import Any, Dict, Generator, Tuple, Literal, ClassVar, Type

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Money goes in as exact text, NUMERIC affinity stores it as a number
sqlite3.register_adapter(Decimal, str)


class Backend(StrEnum):
    SQLITE = auto()
    POSTGRESQL = auto()
    MYSQL = auto()


class DBClient:
    OperationalError: ClassVar[Tuple[Type[BaseException], ...]] = (
        sqlite3.OperationalError,
        psycopg2.OperationalError,
        pymysql.err.OperationalError
    )
    ProgrammingError: ClassVar[Tuple[Type[BaseException], ...]] = (
        sqlite3.ProgrammingError,
        psycopg2.ProgrammingError,
        pymysql.err.ProgrammingError
    )
    IntegrityError: ClassVar[Tuple[Type[BaseException], ...]] = (
        sqlite3.IntegrityError,
        psycopg2.IntegrityError,
        pymysql.err.IntegrityError
    )

    def __init__(self):
        self.uri = None
        self.backend = None
        self._columns: Dict[str, Dict[str, str]] = {}

    def init_app(self, app):
        uri = (
            app.config.get("DATABASE_URI")
            or app.config.get("DATABASE_URL")
            or os.getenv("DATABASE_URL")
        )
        if not uri:
            raise RuntimeError("No Database config found")

        if uri.startswith("sqlite:///"):
            self.backend = Backend.SQLITE
        elif uri.startswith(("postgresql://", "postgres://")):
            self.backend = Backend.POSTGRESQL
        elif uri.startswith(("mysql://", "mariadb://")):
            self.backend = Backend.MYSQL
        else:
            raise ValueError(f"Unsupported DATABASE_URI: {uri}")

        self.uri = uri
        self._columns = {}
        app.extensions["db"] = self
        logger.info("Database configured (%s)", self.backend)

    def checkDB(self, table_schema=None):
        setupDB(table_schema or schema, self)
        self._columns = {}

    @staticmethod
    def _dict_factory(cursor, row):
        return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}

    @retry(tries=3,
           delay=1,
           backoff=2,
           exceptions=OperationalError,
           logger=logger,
           )
    def _connect(self) -> Tuple[Any, Any]:
        """Establish connection/ cursor. Only the handshake is retried, never a query."""
        if not self.uri:
            raise RuntimeError("DBClient not initialized. Call init_app() first.")

        if self.backend == Backend.SQLITE:
            path = self.uri.split(":///", 1)[-1] or ":memory:"
            db_path = str(Path(path).expanduser().resolve()) if path != ":memory:" else ":memory:"
            if db_path != ":memory:":
                os.makedirs(os.path.dirname(db_path), exist_ok=True)
            conn = sqlite3.connect(db_path, timeout=30, check_same_thread=False)
            conn.execute("PRAGMA foreign_keys = ON")
            conn.execute("PRAGMA journal_mode = WAL")
            conn.row_factory = self._dict_factory
            return conn, conn.cursor()

        if self.backend == Backend.POSTGRESQL:
            conn = psycopg2.connect(self.uri, connect_timeout=10)
            conn.set_session(autocommit=False)
            cur = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
            cur.execute("SET client_min_messages TO WARNING;")
            return conn, cur

        if self.backend == Backend.MYSQL:
            parsed = urlparse(self.uri)
            conn = pymysql.connect(
                host=parsed.hostname or "localhost",
                port=parsed.port or 3306,
                user=parsed.username or "",
                password=parsed.password or "",
                database=parsed.path.lstrip("/") or None,
                charset="utf8mb4",
                autocommit=False,
                connect_timeout=10,
                cursorclass=pymysql.cursors.DictCursor,
            )
            return conn, conn.cursor()

        raise ValueError(f"Unsupported Database Backend: {self.backend}")

    @contextmanager
    def connection(self, autocommit: bool = True) -> Generator[Tuple[Any, Any], None, None]:
        """
        Context manager for conn/cursor. Everything inside is one transaction:
        committed on exit, rolled back on any exception.
        Usage:
        with db.connection() as (conn, cur):
            cur.execute(db.sql("SELECT * FROM table WHERE id = ?"), params)
            results = cur.fetchall()
        """
        conn, cur = self._connect()
        try:
            yield conn, cur
            if autocommit:
                conn.commit()
        except self.OperationalError as e:
            conn.rollback()
            logger.warning(f"Operational DB error: {e}")
            raise
        except self.ProgrammingError as e:
            conn.rollback()
            logger.error(f"Database Programming error: {e}")
            raise
        except self.IntegrityError as e:
            conn.rollback()
            logger.info(f"Integrity Error during DB operation: {e}")
            raise
        except Exception:
            conn.rollback()
            raise
        finally:
            try:
                cur.close()
            except Exception:
                pass
            try:
                conn.close()
            except Exception:
                pass

    def sql(self, query: str) -> str:
        """Queries are written with '?' placeholders; adapt them to the driver."""
        if self.backend == Backend.SQLITE:
            return query
        return query.replace("?", "%s")

    def insert(self, cur: Any, table_name: str, data: Dict[str, Any]) -> int:
        columns = ", ".join(data.keys())
        placeholders = ", ".join("?" for _ in data)
        query = f"INSERT INTO {table_name} ({columns}) VALUES ({placeholders})"
        if self.backend == Backend.POSTGRESQL:
            cur.execute(self.sql(f"{query} RETURNING id"), tuple(data.values()))
            return cur.fetchone()["id"]
        cur.execute(self.sql(query), tuple(data.values()))
        return cur.lastrowid

    def execute(
        self,
        query: str,
        params: tuple | dict | None = None,
        fetch: Literal["all", "one", "none"] = "all",
    ) -> Any:
        with self.connection() as (conn, cur):
            cur.execute(self.sql(query), params or ())
            if fetch == "all":
                return cur.fetchall()
            if fetch == "one":
                return cur.fetchone()
            return cur.rowcount

    def get_columns(self, table_name: str) -> Dict[str, str]:
        if table_name in self._columns:
            return self._columns[table_name]
        if self.backend == Backend.SQLITE:
            res = self.execute(f"PRAGMA table_info({table_name})", fetch="all")
            columns = {row["name"].lower(): row["type"].lower() for row in res}
        elif self.backend == Backend.POSTGRESQL:
            query = """
                SELECT column_name, data_type
                FROM information_schema.columns
                WHERE table_name = ?
                  AND table_schema = current_schema()
                ORDER BY ordinal_position
            """
            res = self.execute(query, (table_name,), fetch="all")
            columns = {row["column_name"].lower(): row["data_type"].lower() for row in res}
        elif self.backend == Backend.MYSQL:
            query = """
                SELECT column_name AS column_name, data_type AS data_type
                FROM information_schema.columns
                WHERE table_name = ?
                  AND table_schema = DATABASE()
                ORDER BY ordinal_position
            """
            res = self.execute(query, (table_name,), fetch="all")
            columns = {row["column_name"].lower(): row["data_type"].lower() for row in res}
        else:
            raise ValueError(f"Unsupported backend: {self.backend}")
        if columns:
            self._columns[table_name] = columns
        return columns

    @staticmethod
    def is_duplicate(exc: Exception, column: str | None = None) -> bool:
        """
        Checks if Exception is for duplicate entry error
        """
        msg = str(exc).lower()
        checks = ["unique", "duplicate", "uniq_", "key"]
        if not any(c in msg for c in checks):
            return False
        if column:
            return column.lower() in msg
        return True


db = DBClient()
