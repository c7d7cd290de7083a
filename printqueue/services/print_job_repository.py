import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import case, delete, func
from sqlmodel import Session, col, select

from printqueue.models.filament import Filament
from printqueue.models.print_job import (
    ACTIVE_STATUSES,
    STATUS_SORT_ORDER,
    UNKNOWN_STATUS_SORT,
    PrintJob,
    PrintJobMaterial,
    PrintJobMaterialRead,
    PrintJobRead,
    QueueFilter,
    QueueSummary,
)
from printqueue.models.product import Product
from printqueue.normalize import build_fallback_identifier


def _status_rank():
    return case(
        {status.value: rank for status, rank in STATUS_SORT_ORDER.items()},
        value=PrintJob.status,
        else_=UNKNOWN_STATUS_SORT,
    )


def _joined_jobs_query():
    return (
        select(PrintJob, Product, Filament)
        .outerjoin(Product, PrintJob.product_id == Product.id)
        .outerjoin(Filament, PrintJob.filament_id == Filament.id)
    )


def _apply_filter(stmt, queue_filter: QueueFilter):
    if queue_filter == QueueFilter.TODOS:
        return stmt
    if queue_filter == QueueFilter.ATIVOS:
        # Allow-List, deckt jeden nicht abgeschlossenen Status ab (siehe ACTIVE_STATUSES)
        return stmt.where(col(PrintJob.status).in_([s.value for s in ACTIVE_STATUSES]))
    return stmt.where(PrintJob.status == queue_filter.value)


def get_job(session: Session, job_id: int) -> Optional[PrintJob]:
    return session.get(PrintJob, job_id)


def get_materials(session: Session, job_id: int) -> List[PrintJobMaterial]:
    stmt = select(PrintJobMaterial).where(PrintJobMaterial.print_job_id == job_id).order_by(PrintJobMaterial.id)
    return list(session.exec(stmt).all())


def find_by_identifier(session: Session, identifier: str) -> Optional[PrintJob]:
    stmt = select(PrintJob).where(func.upper(PrintJob.identifier) == identifier.upper())
    return session.exec(stmt).first()


def _materials_by_job(session: Session, job_ids: Iterable[int]) -> Dict[int, List[PrintJobMaterialRead]]:
    ids = list(job_ids)
    grouped: Dict[int, List[PrintJobMaterialRead]] = defaultdict(list)
    if not ids:
        return grouped
    stmt = (
        select(PrintJobMaterial, Filament)
        .join(Filament, PrintJobMaterial.filament_id == Filament.id)
        .where(col(PrintJobMaterial.print_job_id).in_(ids))
        .order_by(PrintJobMaterial.id)
    )
    for material, filament in session.exec(stmt).all():
        grouped[material.print_job_id].append(
            PrintJobMaterialRead(
                id=material.id,
                print_job_id=material.print_job_id,
                filament_id=material.filament_id,
                weight_per_unit=material.weight_per_unit,
                filament_name=filament.name,
                filament_color=filament.color,
            )
        )
    return grouped


def _to_read(
    job: PrintJob,
    product: Optional[Product],
    filament: Optional[Filament],
    materials: List[PrintJobMaterialRead],
) -> PrintJobRead:
    data = job.model_dump()
    data["identifier"] = job.identifier or build_fallback_identifier(job.id)
    data["failed_quantity"] = job.failed_quantity or 0
    return PrintJobRead(
        **data,
        product_name=product.name if product else None,
        product_weight=product.weight if product else None,
        product_stl_link=product.stl_link if product else None,
        filament_name=filament.name if filament else None,
        filament_color=filament.color if filament else None,
        filament_cost=filament.cost_per_gram if filament else None,
        materials=materials,
    )


def list_jobs(session: Session, queue_filter: QueueFilter = QueueFilter.TODOS) -> List[PrintJobRead]:
    """Kanonische Fila-Ansicht.

    Sortierung: Statusklasse (IMPRIMINDO, FILA, PAUSADO, CONCLUIDO, CANCELADO,
    Rest), dann Position, dann Anlagezeitpunkt.
    """
    stmt = _apply_filter(_joined_jobs_query(), queue_filter).order_by(
        _status_rank(),
        col(PrintJob.position).asc(),
        col(PrintJob.created_at).asc(),
        col(PrintJob.id).asc(),
    )
    rows = session.exec(stmt).all()
    materials = _materials_by_job(session, (job.id for job, _, _ in rows))
    return [_to_read(job, product, filament, materials.get(job.id, [])) for job, product, filament in rows]


def get_job_view(session: Session, job_id: int) -> Optional[PrintJobRead]:
    row = session.exec(_joined_jobs_query().where(PrintJob.id == job_id)).first()
    if row is None:
        return None
    job, product, filament = row
    materials = _materials_by_job(session, [job.id])
    return _to_read(job, product, filament, materials.get(job.id, []))


def delete_job(session: Session, job: PrintJob) -> None:
    """Löscht Auftrag samt Materialzeilen (ohne Commit)."""
    session.exec(delete(PrintJobMaterial).where(PrintJobMaterial.print_job_id == job.id))
    session.delete(job)


def queue_summary(session: Session) -> QueueSummary:
    jobs = session.exec(select(PrintJob)).all()
    total_jobs = len(jobs)
    if not total_jobs:
        return QueueSummary()

    active_values = {s.value for s in ACTIVE_STATUSES}
    completion_sum = 0.0
    for job in jobs:
        total = max(1, job.total_quantity or 0)
        completion_sum += min(100.0, job.processed_quantity / total * 100.0)

    return QueueSummary(
        total_jobs=total_jobs,
        active_jobs=sum(1 for job in jobs if job.status in active_values),
        total_success=sum(job.printed_quantity or 0 for job in jobs),
        total_fail=sum(job.failed_quantity or 0 for job in jobs),
        completion_average=math.floor(completion_sum / total_jobs + 0.5),
    )
