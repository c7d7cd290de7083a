import copy

import bcrypt
from fastapi.testclient import TestClient
from sqlmodel import select

from printqueue.auth import AdminGuard
from printqueue.config import DEFAULT_CONFIG
from printqueue.database import Database
from printqueue.main import create_app
from printqueue.models.filament import Filament
from printqueue.models.print_job import PrintJob, PrintJobMaterial
from printqueue.models.product import Product

TEST_ADMIN_PASSWORD = "printqueue-test-admin"
TEST_ADMIN_HASH_ROUNDS = 4


def make_admin_password_hash(password: str = TEST_ADMIN_PASSWORD) -> str:
    """Reproduzierbarer Admin-Hash für Tests, damit wir das Passwort kennen."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=TEST_ADMIN_HASH_ROUNDS),
    ).decode("utf-8")


def add_product(database: Database, name: str = "Suporte de celular", weight: float = 10.0, **kwargs) -> int:
    with database.session() as session:
        product = Product(name=name, weight=weight, **kwargs)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product.id


def add_filament(
    database: Database,
    name: str = "PLA Preto",
    total_weight: float = 1000.0,
    used_weight: float = 0.0,
    **kwargs,
) -> int:
    with database.session() as session:
        filament = Filament(name=name, total_weight=total_weight, used_weight=used_weight, **kwargs)
        session.add(filament)
        session.commit()
        session.refresh(filament)
        return filament.id


def load_filament(database: Database, filament_id: int) -> Filament:
    with database.session() as session:
        return session.get(Filament, filament_id)


def load_job(database: Database, job_id: int) -> PrintJob:
    with database.session() as session:
        return session.get(PrintJob, job_id)


def count_material_lines(database: Database, job_id: int) -> int:
    with database.session() as session:
        rows = session.exec(select(PrintJobMaterial).where(PrintJobMaterial.print_job_id == job_id)).all()
        return len(rows)


def build_client(database: Database, admin_guard: AdminGuard = None) -> TestClient:
    app = create_app(
        config=copy.deepcopy(DEFAULT_CONFIG),
        database=database,
        admin_guard=admin_guard or AdminGuard(None),
    )
    return TestClient(app)
