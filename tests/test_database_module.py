from datetime import datetime

import pytest
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from printqueue.database import Database, init_db, verify_schema_or_exit
from printqueue.models.product import Product


def test_database_requires_open():
    db = Database("sqlite://")
    with pytest.raises(RuntimeError):
        db.engine


def test_for_path_and_db_path(tmp_path):
    db = Database.for_path(str(tmp_path / "queue.db"))
    assert db.is_sqlite
    assert db.db_path == str(tmp_path / "queue.db")
    assert Database("sqlite://").db_path is None


def test_foreign_keys_enabled(database):
    with database.engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


def test_init_db_runs_migrations(tmp_path):
    db = Database.for_path(str(tmp_path / "data" / "queue.db"))
    init_db(db)
    try:
        tables = set(inspect(db.engine).get_table_names())
        assert {"product", "filament", "print_job", "print_job_material", "alembic_version"} <= tables
        indexes = {ix["name"]: ix for ix in inspect(db.engine).get_indexes("print_job")}
        assert indexes["ix_print_job_identifier"]["unique"]
        with db.engine.connect() as conn:
            ddl = conn.exec_driver_sql("SELECT sql FROM sqlite_master WHERE name = 'print_job'").scalar()
        assert "AUTOINCREMENT" in ddl

        # zweiter Start: bereits auf head
        init_db(db)
    finally:
        db.close()


def test_init_db_stamps_existing_schema(tmp_path):
    db = Database.for_path(str(tmp_path / "legacy.db"))
    db.open()
    db.create_all()

    init_db(db)
    try:
        with db.engine.connect() as conn:
            version = conn.exec_driver_sql("SELECT version_num FROM alembic_version").scalar()
        assert version == "20260124_add_print_job_material"
    finally:
        db.close()


def test_verify_schema_exits_on_missing_table():
    db = Database("sqlite://", poolclass=StaticPool)
    db.open()
    try:
        with pytest.raises(SystemExit):
            verify_schema_or_exit(db.engine)
    finally:
        db.close()


def test_verify_schema_exits_on_missing_column(database):
    with pytest.raises(SystemExit):
        verify_schema_or_exit(database.engine, {"print_job": {"id", "does_not_exist"}})
    # vollständiges Schema besteht die Prüfung
    verify_schema_or_exit(database.engine)
    assert "print_job" in SQLModel.metadata.tables


def test_naive_timestamps_round_trip(database):
    # Defaults sind naive UTC-datetimes, die Engine muss sie ohne Zeitzone speichern
    with database.session() as session:
        product = Product(name="Vaso", weight=30.0)
        session.add(product)
        session.commit()
        product_id = product.id

    with database.session() as session:
        stored = session.get(Product, product_id)
        assert isinstance(stored.created_at, datetime)
        assert stored.created_at.tzinfo is None
        assert stored.updated_at >= stored.created_at
