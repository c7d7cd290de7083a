"""
Lebenszyklus der Druckaufträge

Orchestriert Anlegen, Aktualisieren und Löschen von Aufträgen:
- validiert Produkt-/Filament-Referenzen und die Mengen-Invariante
- setzt Start-/Abschlusszeitpunkt genau einmal
- bucht Mengen-Deltas als Verbrauch bzw. Rückbuchung ins Filament-Ledger
"""
import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from printqueue.errors import ConflictError, NotFoundError, ValidationError
from printqueue.models.print_job import (
    MaterialLineSchema,
    PrintJob,
    PrintJobCreateSchema,
    PrintJobMaterial,
    PrintJobRead,
    PrintJobUpdateSchema,
    ProductionStatus,
    parse_customer_stage,
    parse_production_status,
)
from printqueue.normalize import build_fallback_identifier, normalize_identifier, normalize_text
from printqueue.services import filament_ledger
from printqueue.services import print_job_repository as repository
from printqueue.services.catalog import find_product
from printqueue.services.queue_ordering import apply_reorder, next_position

logger = logging.getLogger("queue")


class JobLifecycleController:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def create_job(self, data: PrintJobCreateSchema) -> PrintJobRead:
        session = self.session

        product_id = data.product_id or 0
        if product_id <= 0:
            raise ValidationError("Produto é obrigatório")
        if find_product(session, product_id) is None:
            raise NotFoundError("Produto não encontrado")

        filament_id = data.filament_id if data.filament_id and data.filament_id > 0 else None
        if filament_id and filament_ledger.find_filament(session, filament_id) is None:
            raise NotFoundError("Filamento não encontrado")

        materials = data.materials or []
        self._validate_materials(materials)

        identifier = normalize_identifier(data.identifier)
        if identifier and repository.find_by_identifier(session, identifier):
            raise ConflictError("Identificador já está em uso")

        estimated = data.estimated_minutes or 0
        job = PrintJob(
            identifier=identifier,
            product_id=product_id,
            filament_id=filament_id,
            total_quantity=max(1, data.total_quantity if data.total_quantity is not None else 1),
            printed_quantity=0,
            failed_quantity=0,
            priority=max(1, data.priority if data.priority is not None else 1),
            estimated_minutes=estimated or None,
            position=next_position(session),
            customer_name=normalize_text(data.customer_name),
            customer_contact=normalize_text(data.customer_contact),
            customer_stage=parse_customer_stage(data.customer_stage).value,
            status=ProductionStatus.FILA.value,
            notes=normalize_text(data.notes),
        )

        try:
            session.add(job)
            session.flush()
            if not job.identifier:
                job.identifier = self._free_fallback_identifier(job.id)
            for line in materials:
                session.add(
                    PrintJobMaterial(
                        print_job_id=job.id,
                        filament_id=line.filament_id,
                        weight_per_unit=line.weight_per_unit,
                    )
                )
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.warning("[QUEUE] Auftrag konnte nicht angelegt werden: %s", exc.orig)
            raise ConflictError("Identificador já está em uso") from exc
        except Exception:
            session.rollback()
            raise

        session.refresh(job)
        logger.info(
            "[QUEUE] Auftrag %s angelegt (produto=%s, meta=%s, posicao=%s, materiais=%s)",
            job.identifier, job.product_id, job.total_quantity, job.position, len(materials),
        )
        return repository.get_job_view(session, job.id)

    def _free_fallback_identifier(self, job_id: int) -> str:
        # JOB-000123 kann schon manuell vergeben sein -> Suffix anhängen
        base = build_fallback_identifier(job_id)
        candidate = base
        suffix = 1
        while repository.find_by_identifier(self.session, candidate) is not None:
            suffix += 1
            candidate = f"{base}-{suffix}"
        return candidate

    def _validate_materials(self, materials: List[MaterialLineSchema]) -> None:
        for line in materials:
            if not line.filament_id or line.filament_id <= 0:
                raise ValidationError("Filamento do material é obrigatório")
            if filament_ledger.find_filament(self.session, line.filament_id) is None:
                raise NotFoundError("Filamento do material não encontrado")

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def update_job(self, job_id: int, data: PrintJobUpdateSchema) -> PrintJobRead:
        session = self.session
        job = repository.get_job(session, job_id)
        if job is None:
            raise NotFoundError("Tarefa não encontrada")

        provided = data.model_fields_set

        next_status = parse_production_status(data.status).value if data.status else job.status
        next_stage = parse_customer_stage(data.customer_stage if data.customer_stage else job.customer_stage).value

        next_printed = max(0, data.printed_quantity if data.printed_quantity is not None else job.printed_quantity or 0)
        next_failed = max(0, data.failed_quantity if data.failed_quantity is not None else job.failed_quantity or 0)
        total_processed = next_printed + next_failed
        if total_processed > job.total_quantity:
            raise ValidationError("Soma de sucesso + falha não pode passar da meta total")

        now = datetime.utcnow()
        if next_status == ProductionStatus.IMPRIMINDO.value and not job.started_at:
            job.started_at = now
        if (next_status == ProductionStatus.CONCLUIDO.value or total_processed == job.total_quantity) and not job.completed_at:
            job.completed_at = now

        delta = total_processed - job.processed_quantity

        job.status = next_status
        job.customer_stage = next_stage
        job.printed_quantity = next_printed
        job.failed_quantity = next_failed
        if "customer_name" in provided:
            job.customer_name = normalize_text(data.customer_name)
        if "customer_contact" in provided:
            job.customer_contact = normalize_text(data.customer_contact)
        if "notes" in provided:
            job.notes = normalize_text(data.notes)
        job.updated_at = now

        try:
            session.add(job)
            if delta:
                self._book_delta(job, delta)
            session.commit()
        except Exception:
            session.rollback()
            raise

        logger.info(
            "[QUEUE] Auftrag %s aktualisiert (status=%s, impressas=%s, falhas=%s, delta=%s)",
            job.identifier, job.status, job.printed_quantity, job.failed_quantity, delta,
        )
        return repository.get_job_view(session, job_id)

    def _book_delta(self, job: PrintJob, delta: int) -> None:
        """Bucht delta × Gewicht pro Stück je Materialzeile ins Ledger."""
        operation = filament_ledger.consume if delta > 0 else filament_ledger.refund
        units = abs(delta)

        lines = repository.get_materials(self.session, job.id)
        if lines:
            for line in lines:
                operation(self.session, line.filament_id, line.weight_per_unit * units)
            return

        # Fallback: einzelnes Legacy-Filament mit dem festen Produktgewicht
        if job.filament_id:
            product = find_product(self.session, job.product_id)
            if product is not None:
                operation(self.session, job.filament_id, (product.weight or 0) * units)

    # ------------------------------------------------------------------
    # Delete / Reorder
    # ------------------------------------------------------------------
    def delete_job(self, job_id: int) -> None:
        # Bereits gebuchter Verbrauch wird beim Löschen nicht zurückgebucht
        session = self.session
        job = repository.get_job(session, job_id)
        if job is None:
            raise NotFoundError("Tarefa não encontrada")
        identifier = job.identifier
        try:
            repository.delete_job(session, job)
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.info("[QUEUE] Auftrag %s gelöscht", identifier)

    def reorder(self, entries: Any) -> int:
        return apply_reorder(self.session, entries)

    def get_job(self, job_id: int) -> Optional[PrintJobRead]:
        return repository.get_job_view(self.session, job_id)
