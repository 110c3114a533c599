# backend/scripts/init_db.py
import argparse
import sys
from pathlib import Path

# Ensure "backend/" is on sys.path so "import smartassist" works from a checkout
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from smartassist.db import SessionLocal, engine
from smartassist.models import Base
from smartassist.seed import seed_database


def main() -> int:
    parser = argparse.ArgumentParser(description="Create tables on DATABASE_URL and load demo data")
    parser.add_argument("--no-seed", action="store_true", help="Only create tables")
    args = parser.parse_args()

    # Create tables if they don't exist; does not drop or alter existing ones
    Base.metadata.create_all(engine)
    print(f"Created/verified tables on {engine.url.render_as_string(hide_password=True)}")

    if not args.no_seed:
        db = SessionLocal()
        try:
            inserted = seed_database(db)
        finally:
            db.close()
        print(f"Seeded: {inserted}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
