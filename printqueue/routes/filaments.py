from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from printqueue.auth import require_admin
from printqueue.database import get_session
from printqueue.models.filament import Filament, FilamentCreateSchema, FilamentReadSchema, FilamentUpdateSchema
from printqueue.services.filament_ledger import remaining_percent, remaining_weight

router = APIRouter(prefix="/api/filaments", tags=["Filaments"], dependencies=[Depends(require_admin)])


def _serialize_filament(filament: Filament) -> FilamentReadSchema:
    """API-Repräsentation inkl. Restgewicht und Restkapazität in Prozent."""
    read = FilamentReadSchema.model_validate(filament)
    read.remaining_weight = remaining_weight(filament)
    read.remaining_percent = remaining_percent(filament)
    return read


@router.get("", response_model=List[FilamentReadSchema])
def list_filaments(session: Session = Depends(get_session)):
    result = session.exec(select(Filament).order_by(col(Filament.id).desc())).all()
    return [_serialize_filament(f) for f in result]


@router.get("/{filament_id}", response_model=FilamentReadSchema)
def get_filament(filament_id: int, session: Session = Depends(get_session)):
    filament = session.get(Filament, filament_id)
    if not filament:
        raise HTTPException(status_code=404, detail="Filamento não encontrado")
    return _serialize_filament(filament)


@router.post("", response_model=FilamentReadSchema, status_code=status.HTTP_201_CREATED)
def create_filament(data: FilamentCreateSchema, session: Session = Depends(get_session)):
    payload = data.model_dump(exclude_none=True)
    payload.setdefault("status", "Disponível")
    filament = Filament(**payload)
    session.add(filament)
    session.commit()
    session.refresh(filament)
    return _serialize_filament(filament)


@router.put("/{filament_id}", response_model=FilamentReadSchema)
def update_filament(filament_id: int, data: FilamentUpdateSchema, session: Session = Depends(get_session)):
    filament = session.get(Filament, filament_id)
    if not filament:
        raise HTTPException(status_code=404, detail="Filamento não encontrado")
    # nur gesetzte Felder übernehmen, null lässt den Wert stehen
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(filament, key, value)
    filament.updated_at = datetime.utcnow()
    session.add(filament)
    session.commit()
    session.refresh(filament)
    return _serialize_filament(filament)


@router.delete("/{filament_id}")
def delete_filament(filament_id: int, session: Session = Depends(get_session)):
    filament = session.get(Filament, filament_id)
    if not filament:
        raise HTTPException(status_code=404, detail="Filamento não encontrado")
    try:
        session.delete(filament)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise HTTPException(status_code=409, detail="Filamento em uso por tarefas da fila") from exc
    return {"message": "Filamento removido com sucesso"}
