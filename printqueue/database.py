import logging
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import Request
from sqlalchemy import event, inspect
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger("app")

BASE_DIR = Path(__file__).resolve().parents[1]

# Nur Tabellen/Spalten, von denen der Laufzeit-Code direkt abhängt
REQUIRED_SCHEMA: Dict[str, Iterable[str]] = {
    "product": {"id", "name", "weight"},
    "filament": {"id", "name", "total_weight", "used_weight", "cost_per_gram"},
    "print_job": {
        "id",
        "identifier",
        "product_id",
        "filament_id",
        "status",
        "customer_stage",
        "total_quantity",
        "printed_quantity",
        "failed_quantity",
        "position",
        "started_at",
        "completed_at",
        "created_at",
    },
    "print_job_material": {"id", "print_job_id", "filament_id", "weight_per_unit"},
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Besitzt die Engine der eingebetteten Datenbank.

    Wird beim Start geöffnet und beim Shutdown geschlossen; Routen holen ihre
    Session über `get_session`, nie über eine modulweite Engine.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        self._engine_kwargs = engine_kwargs
        self._engine: Optional[Engine] = None

    @classmethod
    def for_path(cls, db_path: str) -> "Database":
        return cls(f"sqlite:///{db_path}")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def db_path(self) -> Optional[str]:
        if not self.url.startswith("sqlite:///"):
            return None
        path = self.url[len("sqlite:///"):]
        return path or None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Datenbank ist nicht geöffnet")
        return self._engine

    def open(self) -> Engine:
        if self._engine is not None:
            return self._engine
        kwargs = dict(self._engine_kwargs)
        if self.is_sqlite:
            connect_args = dict(kwargs.pop("connect_args", {}) or {})
            # FastAPI führt sync-Routen im Threadpool aus
            connect_args.setdefault("check_same_thread", False)
            kwargs["connect_args"] = connect_args
        self._engine = create_engine(self.url, echo=False, **kwargs)
        if self.is_sqlite:
            event.listen(self._engine, "connect", _enable_sqlite_foreign_keys)
        logger.debug("[DB] Engine geöffnet: %s", self.url)
        return self._engine

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("[DB] Engine geschlossen")

    def session(self) -> Session:
        return Session(self.engine)

    def create_all(self) -> None:
        """Legt alle Tabellen direkt an (nur Tests / In-Memory)."""
        import printqueue.models  # noqa: F401  (registriert die Tabellen)

        SQLModel.metadata.create_all(self.engine)


def verify_schema_or_exit(engine: Engine, required_schema: Optional[dict] = None) -> None:
    """
    Prüft, ob die erwarteten Tabellen und Spalten vorhanden sind.
    Bei fehlenden Einträgen wird ein Fehler geloggt und der Prozess beendet.
    """
    if required_schema is None:
        required_schema = REQUIRED_SCHEMA

    inspector = inspect(engine)
    existing_tables = inspector.get_table_names()

    missing = []
    for table, cols in required_schema.items():
        if table not in existing_tables:
            missing.append(f"Missing table: {table}")
            continue
        existing_cols = {c["name"] for c in inspector.get_columns(table)}
        for col in cols:
            if col not in existing_cols:
                missing.append(f"Missing column: {table}.{col}")

    if missing:
        logger.error("[DB] Schema validation failed")
        for item in missing:
            logger.error("[DB] %s", item)
        logger.error("[DB] Fix: run `alembic upgrade head`. Server will exit.")
        sys.exit(1)


def _alembic_config(database: Database) -> Config:
    cfg = Config(str(BASE_DIR / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database.url)
    cfg.set_main_option("script_location", str(BASE_DIR / "alembic"))
    return cfg


def run_migrations(database: Database) -> None:
    """Führt Alembic-Migrationen bis head aus."""
    logger.info("Starte Alembic-Migrationen...")
    cfg = _alembic_config(database)
    engine = database.engine

    existing_tables = set(inspect(engine).get_table_names())
    if "alembic_version" not in existing_tables and "print_job" in existing_tables:
        logger.info("Bestehende Tabellen ohne alembic_version gefunden, setze Revision auf head.")
        with engine.begin() as connection:
            cfg.attributes["connection"] = connection
            command.stamp(cfg, "head")
        return

    if "alembic_version" in existing_tables:
        with engine.connect() as conn:
            current = conn.exec_driver_sql("SELECT version_num FROM alembic_version").fetchone()
        heads = ScriptDirectory.from_config(cfg).get_heads()
        if current and len(heads) == 1 and current[0] == heads[0]:
            logger.info("Datenbank ist bereits auf head (%s). Keine Migrationen nötig.", current[0])
            return

    with engine.begin() as connection:
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, "head")
    logger.info("[DB] Alembic upgrade head erfolgreich abgeschlossen.")


def init_db(database: Database) -> None:
    """
    Öffnet die Datenbank, führt Migrationen aus und prüft das Schema.
    Tabellen werden ausschließlich über Alembic verwaltet.
    """
    logger.info("Initialisiere Datenbank...")
    db_path = database.db_path
    if db_path:
        db_dir = os.path.dirname(db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    database.open()
    try:
        run_migrations(database)
    except Exception:
        logger.exception("Fehler bei Migrationen, Server wird beendet.")
        sys.exit(1)

    verify_schema_or_exit(database.engine)
    logger.info("[STARTUP] Datenbank bereit | Migrationen OK | Schema OK")


def get_session(request: Request) -> Iterator[Session]:
    """
    Dependency für FastAPI-Routen.
    """
    database: Database = request.app.state.db
    with database.session() as session:
        yield session
