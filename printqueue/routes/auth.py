import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field
from starlette.status import HTTP_401_UNAUTHORIZED

from printqueue.auth import AdminGuard

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = logging.getLogger("app")


class LoginSchema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    password: str = Field("", alias="senha")


@router.post("/login")
def login(data: LoginSchema, request: Request):
    guard: AdminGuard = request.app.state.admin_guard
    if not guard.enabled:
        return {"token": None, "enabled": False}
    if not guard.verify_password(data.password):
        logger.warning("Admin-Login fehlgeschlagen (%s)", request.client.host if request.client else "unknown")
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Credenciais inválidas")
    return {"token": guard.issue_token(), "enabled": True, "expires_in": guard.token_ttl}
