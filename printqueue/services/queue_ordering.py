import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, update
from sqlmodel import Session, select

from printqueue.errors import ValidationError
from printqueue.models.print_job import PrintJob
from printqueue.normalize import normalize_integer

logger = logging.getLogger("queue")


def next_position(session: Session) -> int:
    """Neue Aufträge hängen immer ans Ende der Fila."""
    max_pos = session.exec(select(func.max(PrintJob.position))).one_or_none()
    return (max_pos or 0) + 1


def apply_reorder(session: Session, entries: Any) -> int:
    """
    Überschreibt die Positionen aus einer Liste von {id, posicao}-Paaren.

    Alle gültigen Einträge (id > 0, posicao > 0) werden in einer Transaktion
    geschrieben, ungültige still übersprungen. Liefert die Zahl geänderter Zeilen.
    """
    if not isinstance(entries, list):
        raise ValidationError("Formato inválido para reordenação")

    now = datetime.utcnow()
    applied = 0
    skipped = 0
    try:
        for entry in entries:
            if not isinstance(entry, dict):
                skipped += 1
                continue
            job_id = normalize_integer(entry.get("id"), 0)
            position = normalize_integer(entry.get("posicao", entry.get("position")), 0)
            if job_id <= 0 or position <= 0:
                skipped += 1
                continue
            result = session.exec(
                update(PrintJob).where(PrintJob.id == job_id).values(position=position, updated_at=now)
            )
            applied += result.rowcount or 0
        session.commit()
    except Exception:
        session.rollback()
        raise

    if skipped:
        logger.debug("[QUEUE] Reorder: %s ungültige Einträge übersprungen", skipped)
    logger.info("[QUEUE] Reorder angewendet: %s Aufträge neu positioniert", applied)
    return applied
