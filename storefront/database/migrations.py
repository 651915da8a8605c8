from storefront.utils.logging import get_logger
from typing import Dict, List, Any

log = get_logger(__name__)

STRUCTURAL_KEYS = ("FOREIGN KEY", "UNIQUE")

TYPE_MAP = {
    "INTEGER": {"sqlite": "INTEGER", "postgresql": "INTEGER", "mysql": "INT"},
    "TEXT": {"sqlite": "TEXT", "postgresql": "TEXT", "mysql": "TEXT"},
    "DECIMAL": {"sqlite": "NUMERIC", "postgresql": "NUMERIC(18, 2)", "mysql": "DECIMAL(18, 2)"},
    "TIMESTAMP": {"sqlite": "TEXT", "postgresql": "TEXT", "mysql": "VARCHAR(40)"},
    "BOOL": {"sqlite": "INTEGER", "postgresql": "BOOLEAN", "mysql": "TINYINT(1)"},
}


def _map_type(col_type: str, backend: str, in_key: bool = False) -> str:
    """
    Map schema type strings to DB-specific equivalents. Constraint text is kept verbatim.
    `in_key` marks columns that take part in a composite UNIQUE key.
    """
    base_type, _, constraints = col_type.strip().partition(" ")
    constraints = constraints.strip()
    upper = constraints.upper()
    mapped_base = TYPE_MAP.get(base_type.upper(), {}).get(backend, base_type)

    if "PRIMARY KEY" in upper:
        if "AUTOINCREMENT" in upper or "AUTO_INCREMENT" in upper:
            if backend == "sqlite":
                return f"{mapped_base} PRIMARY KEY AUTOINCREMENT"
            elif backend == "postgresql":
                return "SERIAL PRIMARY KEY"
            elif backend == "mysql":
                return f"{mapped_base} AUTO_INCREMENT PRIMARY KEY"
        return f"{mapped_base} PRIMARY KEY"

    # MySQL cannot index or default a TEXT column
    if backend == "mysql" and mapped_base == "TEXT" and (in_key or "UNIQUE" in upper or "DEFAULT" in upper):
        mapped_base = "VARCHAR(255)"
    if backend == "postgresql" and mapped_base == "BOOLEAN":
        constraints = constraints.replace("DEFAULT 1", "DEFAULT TRUE").replace("DEFAULT 0", "DEFAULT FALSE")
    return f"{mapped_base} {constraints}".strip()


def _table_exists(db: Any, cur: Any, table_name: str) -> bool:
    backend = db.backend
    if backend == "sqlite":
        query = "SELECT 1 FROM sqlite_master WHERE type='table' AND name=?"
    elif backend == "postgresql":
        query = "SELECT 1 FROM information_schema.tables WHERE table_name = ? AND table_schema = current_schema()"
    elif backend == "mysql":
        query = "SELECT 1 FROM information_schema.tables WHERE table_name = ? AND table_schema = DATABASE()"
    else:
        raise ValueError(f"Unsupported backend: {backend}")
    cur.execute(db.sql(query), (table_name,))
    return cur.fetchone() is not None


def _row_count(cur: Any, table_name: str) -> int:
    cur.execute(f"SELECT COUNT(*) AS total FROM {table_name}")
    return cur.fetchone()["total"]


def _create_table(cur: Any, table_name: str, cols_def: Dict[str, Any], backend: str) -> None:
    unique = cols_def.get("UNIQUE")
    key_columns = set(unique) if isinstance(unique, list) else set()
    parts = []
    for col_name, col_type in cols_def.items():
        if col_name.upper() in STRUCTURAL_KEYS:
            continue
        parts.append(f"{col_name} {_map_type(col_type, backend, in_key=col_name in key_columns)}")

    if key_columns:
        parts.append(f"UNIQUE ({', '.join(unique)})")

    fks = cols_def.get("FOREIGN KEY", [])
    if not isinstance(fks, list):
        fks = [fks]
    for fk in fks:
        instr = fk.get("instruction", "").strip()
        parts.append(
            f"FOREIGN KEY ({fk['key']}) REFERENCES {fk['parent_table']}({fk['parent_key']}) {instr}".strip()
        )
    cur.execute(f"CREATE TABLE {table_name} ({', '.join(parts)})")


def _add_column(cur: Any, table_name: str, col_name: str, col_type: str, backend: str) -> None:
    upper = col_type.upper()
    if "NOT NULL" in upper and "DEFAULT" not in upper and _row_count(cur, table_name) > 0:
        # Existing rows need a value; added before mapping so MySQL gets a VARCHAR
        default_val = "''" if upper.startswith(("TEXT", "TIMESTAMP")) else "0"
        col_type = f"{col_type} DEFAULT {default_val}"
    mapped_type = _map_type(col_type, backend)
    if "UNIQUE" in mapped_type.upper() and backend == "sqlite":
        # SQLite cannot ALTER in a UNIQUE column
        mapped_type = mapped_type.replace("UNIQUE", "").replace("unique", "")
    cur.execute(f"ALTER TABLE {table_name} ADD COLUMN {col_name} {' '.join(mapped_type.split())}")


def setupDB(schema: List[Dict[str, Any]], db: Any) -> None:
    """
    Synchronize DB schema safely:
    - Create missing tables with all columns/constraints, parents first.
    - Add missing columns to existing tables.
    - Never drops or rewrites existing data.
    """
    if not schema:
        log.error("No schema provided")
        return
    backend = str(db.backend)

    with db.connection() as (conn, cur):
        for table_def in schema:
            table_name = table_def["table_name"]
            cols_def = table_def["table_columns"]
            log.debug(f"Syncing {table_name}")

            if not _table_exists(db, cur, table_name):
                _create_table(cur, table_name, cols_def, backend)
                log.info(f"Created table {table_name}")
                continue

            existing_cols = db.get_columns(table_name)
            for col_name, col_type in cols_def.items():
                if col_name.upper() in STRUCTURAL_KEYS:
                    continue
                if col_name.lower() not in existing_cols:
                    _add_column(cur, table_name, col_name, col_type, backend)
                    log.info(f"Added column {table_name}.{col_name}")

    log.info("Schema sync complete")
