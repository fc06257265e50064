"""
Module: inventory_kernel.db.triggers
Responsibility: Loading, installing, and verifying PostgreSQL immutability
    triggers (layer 2 of 2).  This is the database-level complement to the
    ORM-level listeners in db/immutability.py.
Architecture position: Kernel > DB.  May import from db/ only.  MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced (via 4 PostgreSQL triggers across 2 SQL files):
    - supply_movements rows: no UPDATE, no DELETE.
    - supplies rows: no DELETE (soft delete only).
    - supply_stock rows: no DELETE.

Failure modes:
    - PostgreSQL RAISE EXCEPTION on any trigger violation (surfaced by
      SQLAlchemy as InternalError / IntegrityError).
    - FileNotFoundError if SQL files are missing from the sql/ directory.

Audit relevance:
    Even if the ORM layer is bypassed (raw SQL, bulk operations, direct
    psql access), the database refuses to rewrite stock history.
"""

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine

SQL_DIR = Path(__file__).parent / "sql"

TRIGGER_FILES = [
    "01_supply_movement.sql",
    "02_supply.sql",
]

DROP_FILE = "99_drop_all.sql"

ALL_TRIGGER_NAMES = [
    "trg_supply_movement_immutability_update",
    "trg_supply_movement_immutability_delete",
    "trg_supply_deletion_protection",
    "trg_supply_stock_deletion_protection",
]


def _load_sql_file(filename: str) -> str:
    return (SQL_DIR / filename).read_text(encoding="utf-8")


def _load_all_trigger_sql() -> str:
    """Concatenate all trigger SQL files in numbered order."""
    sql_parts = []
    for filename in TRIGGER_FILES:
        sql_parts.append(f"-- Loading: {filename}")
        sql_parts.append(_load_sql_file(filename))
        sql_parts.append("")
    return "\n".join(sql_parts)


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install database-level immutability triggers.

    Preconditions: Tables must exist (call after metadata.create_all()).
        Engine must be connected to PostgreSQL.
    Postconditions: All triggers in ALL_TRIGGER_NAMES are installed.
        Functions use CREATE OR REPLACE, so installation is idempotent.
    """
    sql_content = _load_all_trigger_sql()
    with engine.connect() as conn:
        conn.execute(text(sql_content))
        conn.commit()


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove database-level immutability triggers.

    Only for test teardown and migrations that must rewrite history;
    re-install immediately afterwards.
    """
    with engine.connect() as conn:
        conn.execute(text(_load_sql_file(DROP_FILE)))
        conn.commit()


def get_installed_triggers(engine: Engine) -> list[str]:
    """Return the names of installed immutability triggers, sorted."""
    trigger_list = ", ".join(f"'{name}'" for name in ALL_TRIGGER_NAMES)
    check_sql = f"""
    SELECT tgname FROM pg_trigger
    WHERE tgname IN ({trigger_list})
    ORDER BY tgname;
    """
    with engine.connect() as conn:
        return [row[0] for row in conn.execute(text(check_sql))]


def triggers_installed(engine: Engine) -> bool:
    """Check if all immutability triggers are installed."""
    return len(get_installed_triggers(engine)) == len(ALL_TRIGGER_NAMES)
