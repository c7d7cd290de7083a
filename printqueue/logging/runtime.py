"""
Laufzeit-Logging der PrintQueue

Ein rotierendes logs/app/app.log plus Konsole, beide am Root-Logger.
Die Modul-Logger (app, queue, ledger, errors) lassen sich über config.yaml
einzeln abschalten; reconfigure_logging() darf mehrfach laufen.
"""
import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

LOG_DIR = Path("logs/app")
LOG_FILE_NAME = "app.log"
MODULES = ("app", "queue", "ledger", "errors")
LOG_FORMATTER = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
SILENT = logging.CRITICAL + 10

_installed: List[logging.Handler] = []


class LogSettings(NamedTuple):
    enabled: bool
    level: int
    max_bytes: int
    backup_count: int
    keep_days: int
    modules: Dict[str, bool]

    @classmethod
    def from_config(cls, cfg: dict) -> "LogSettings":
        level_name = str(cfg.get("level") or "INFO").upper()
        if level_name not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            level_name = "INFO"
        modules_cfg = cfg.get("modules") or {}
        return cls(
            enabled=bool(cfg.get("enabled", True)),
            level=getattr(logging, level_name),
            max_bytes=max(1, int(cfg.get("max_size_mb", 10))) * 1024 * 1024,
            backup_count=max(1, int(cfg.get("backup_count", 3))),
            keep_days=int(cfg.get("keep_days", 0)),
            modules={name: bool((modules_cfg.get(name) or {}).get("enabled", True)) for name in MODULES},
        )


def _remove_installed_handlers() -> None:
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def _attach(handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(LOG_FORMATTER)
    logging.getLogger().addHandler(handler)
    _installed.append(handler)


def _prune_rotated_files(log_dir: Path, keep_days: int) -> None:
    if keep_days <= 0:
        return
    cutoff = time.time() - keep_days * 86400
    for rotated in log_dir.glob(f"{LOG_FILE_NAME}.*"):
        if rotated.is_file() and rotated.stat().st_mtime < cutoff:
            rotated.unlink(missing_ok=True)


def reconfigure_logging(logging_config: dict, log_dir: Optional[Path] = None, console: bool = True) -> Dict[str, bool]:
    """Installiert die Handler neu und liefert den Status je Modul-Logger."""
    settings = LogSettings.from_config(logging_config)
    target_dir = Path(log_dir) if log_dir else LOG_DIR
    effective = settings.level if settings.enabled else SILENT

    _remove_installed_handlers()
    if settings.enabled:
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            target_dir / LOG_FILE_NAME,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        _attach(file_handler, settings.level)
        if console:
            _attach(logging.StreamHandler(), settings.level)
        _prune_rotated_files(target_dir, settings.keep_days)

    logging.getLogger().setLevel(effective)
    # uvicorn schreibt über die Root-Handler mit, Access-Logs nicht
    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.setLevel(effective)
        uvicorn_logger.propagate = True
    access_logger = logging.getLogger("uvicorn.access")
    for handler in list(access_logger.handlers):
        access_logger.removeHandler(handler)
    access_logger.propagate = False

    statuses: Dict[str, bool] = {}
    for name, module_enabled in settings.modules.items():
        active = settings.enabled and module_enabled
        module_logger = logging.getLogger(name)
        module_logger.disabled = not active
        module_logger.setLevel(settings.level if active else SILENT)
        statuses[name] = active
    return statuses
