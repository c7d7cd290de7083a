import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from printqueue.auth import AdminGuard
from printqueue.config import get_db_path, load_config
from printqueue.database import Database, init_db
from printqueue.routes.auth import router as auth_router
from printqueue.routes.filaments import router as filaments_router
from printqueue.routes.health import router as health_router
from printqueue.routes.queue import router as queue_router

logger = logging.getLogger("app")
error_logger = logging.getLogger("errors")


@asynccontextmanager
async def lifespan(app: FastAPI):
    owned = app.state.db is None
    if owned:
        database = Database.for_path(get_db_path(app.state.config))
        init_db(database)
        app.state.db = database
    logger.info("[APP] Startup abgeschlossen, PrintQueue ist bereit")
    try:
        yield
    finally:
        if owned:
            app.state.db.close()
            app.state.db = None


def create_app(
    config: Optional[Dict[str, Any]] = None,
    database: Optional[Database] = None,
    admin_guard: Optional[AdminGuard] = None,
) -> FastAPI:
    """Baut die FastAPI-App.

    Wird eine geöffnete `Database` übergeben (Tests), übernimmt der Lifespan
    weder Migrationen noch Shutdown.
    """
    app = FastAPI(
        title="PrintQueue",
        description="Produktionsfila und Filament-Ledger für den 3D-Druck-Shop",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config if config is not None else load_config()
    app.state.db = database
    if admin_guard is None:
        admin_hash = os.getenv("ADMIN_PASSWORD_HASH")
        admin_guard = AdminGuard(admin_hash)
        if admin_guard.enabled:
            logger.info("Admin enabled via environment variable")
        else:
            logger.info("Admin disabled (no ADMIN_PASSWORD_HASH)")
    app.state.admin_guard = admin_guard

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        error_logger.exception("Unerwarteter Fehler bei %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Erro interno do servidor"})

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(queue_router)
    app.include_router(filaments_router)
    return app


app = create_app()
