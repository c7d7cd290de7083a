from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlmodel import Session

from printqueue.auth import require_admin
from printqueue.database import get_session
from printqueue.errors import QueueError
from printqueue.models.print_job import (
    PrintJobCreateSchema,
    PrintJobRead,
    PrintJobUpdateSchema,
    QueueSummary,
    parse_queue_filter,
)
from printqueue.services.job_lifecycle import JobLifecycleController
from printqueue.services.print_job_repository import list_jobs, queue_summary

router = APIRouter(prefix="/api/queue", tags=["Queue"], dependencies=[Depends(require_admin)])


def _http_error(exc: QueueError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.get("", response_model=List[PrintJobRead])
def get_queue(status_filter: Optional[str] = Query(None, alias="status"), session: Session = Depends(get_session)):
    """Fila in kanonischer Reihenfolge, optional gefiltert (TODOS, ATIVOS oder ein Status)."""
    return list_jobs(session, parse_queue_filter(status_filter))


@router.get("/summary", response_model=QueueSummary)
def get_queue_summary(session: Session = Depends(get_session)):
    return queue_summary(session)


@router.get("/{job_id}", response_model=PrintJobRead)
def get_job(job_id: int, session: Session = Depends(get_session)):
    job = JobLifecycleController(session).get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Tarefa não encontrada")
    return job


@router.post("", response_model=PrintJobRead, status_code=status.HTTP_201_CREATED)
def create_job(data: PrintJobCreateSchema, session: Session = Depends(get_session)):
    try:
        return JobLifecycleController(session).create_job(data)
    except QueueError as exc:
        raise _http_error(exc) from exc


@router.put("/reorder")
def update_queue_order(payload: Any = Body(None), session: Session = Depends(get_session)):
    # Body: {"jobs": [{"id": 1, "posicao": 1}, ...]}
    entries = payload.get("jobs") if isinstance(payload, dict) else None
    try:
        applied = JobLifecycleController(session).reorder(entries)
    except QueueError as exc:
        raise _http_error(exc) from exc
    return {"message": "Ordem da fila atualizada com sucesso", "updated": applied}


@router.put("/{job_id}", response_model=PrintJobRead)
def update_job(job_id: int, data: PrintJobUpdateSchema, session: Session = Depends(get_session)):
    try:
        return JobLifecycleController(session).update_job(job_id, data)
    except QueueError as exc:
        raise _http_error(exc) from exc


@router.delete("/{job_id}")
def delete_job(job_id: int, session: Session = Depends(get_session)):
    try:
        JobLifecycleController(session).delete_job(job_id)
    except QueueError as exc:
        raise _http_error(exc) from exc
    return {"message": "Tarefa removida da fila"}
