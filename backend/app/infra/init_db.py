# app/infra/init_db.py

import argparse

from sqlalchemy import inspect

from app.core.config import load_settings
from app.infra.postgres import create_store_engine, init_db, test_connection
from app.models.base import Base
from app.models.message import Message  # noqa: F401


def main(argv=None):
    """Create the messages table (optionally dropping it first)"""
    parser = argparse.ArgumentParser(description="Create the relay tables")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args(argv)

    engine = create_store_engine(load_settings())
    if not test_connection(engine):
        print("❌ Database connection failed")
        return 1

    if args.drop:
        print("⚠️  Dropping all tables...")
        Base.metadata.drop_all(bind=engine)

    print("📦 Creating tables...")
    init_db(engine)

    inspector = inspect(engine)
    for table in inspector.get_table_names():
        print(f"\n{table}:")
        for col in inspector.get_columns(table):
            print(f"  - {col['name']}: {col['type']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
