# smartassist/db_check.py
from sqlalchemy import text
from sqlalchemy.engine import Engine


def check_db(engine: Engine) -> dict:
    """
    Connects through the app engine and returns:
      - ok: True/False
      - dialect: 'postgresql', 'sqlite', ...
      - version: server version string
      - tables: which of the app tables exist
    """
    dialect = engine.dialect.name
    version_sql = "SELECT sqlite_version()" if dialect == "sqlite" else "SELECT version()"
    try:
        with engine.connect() as conn:
            version = conn.execute(text(version_sql)).scalar_one()
            existing = set(engine.dialect.get_table_names(conn))
    except Exception as e:
        return {"ok": False, "dialect": dialect, "error": str(e)}

    from .models import Base
    wanted = sorted(Base.metadata.tables)
    return {
        "ok": True,
        "dialect": dialect,
        "version": version,
        "tables": {name: name in existing for name in wanted},
    }
