import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from printqueue.database import get_session

router = APIRouter()
logger = logging.getLogger("app")


@router.get("/health")
def health(session: Session = Depends(get_session)):
    """Maschinenlesbarer Health-Endpoint."""
    try:
        session.connection().exec_driver_sql("SELECT 1")
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Health-Check: Datenbank nicht erreichbar")
        database = "error"
    return {"status": "ok" if database == "ok" else "degraded", "database": database}
