import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

MIGRATION = Path(__file__).resolve().parent.parent / "migrations" / "versions" / "0001_initial.py"


@pytest.fixture
def migration():
    spec = importlib.util.spec_from_file_location("initial_migration", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_initial_migration_up_and_down(migration):
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            migration.upgrade()
            inspector = inspect(conn)
            assert {"users", "packages", "bookings"} <= set(inspector.get_table_names())
            indexes = {ix["name"] for ix in inspector.get_indexes("packages")}
            assert "ix_packages_promo_window" in indexes
            assert not inspector.get_foreign_keys("bookings")

            # Running again over existing tables is a no-op
            migration.upgrade()

            migration.downgrade()
            assert inspect(conn).get_table_names() == []
