# init_db.py (in backend folder)

from sqlalchemy import inspect

from dweetr.config import DATABASE_URL
from dweetr.infra.database import check_connection, create_db_engine
from dweetr.models.base import Base
from dweetr.models.dweet import Dweet  # noqa: F401  registers the table


def init_db(database_url: str = DATABASE_URL):
    """Drop and recreate the dweets table"""
    engine = create_db_engine(database_url)
    if not check_connection(engine):
        raise SystemExit(1)

    print("⚠️  Dropping all tables...")
    Base.metadata.drop_all(bind=engine)
    print("✓ Tables dropped")

    print("📦 Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database initialized successfully!")

    inspector = inspect(engine)
    for table in inspector.get_table_names():
        print(f"\n{table}:")
        for col in inspector.get_columns(table):
            print(f"  - {col['name']}: {col['type']}")
        for index in inspector.get_indexes(table):
            print(f"  * index {index['name']}: {index['column_names']}")


if __name__ == "__main__":
    init_db()
