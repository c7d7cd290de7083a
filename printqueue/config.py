import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

CONFIG_PATH = Path(__file__).resolve().parents[1] / "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 3001,
    },
    "database": {
        "path": "data/printqueue.db",
    },
    "logging": {
        "enabled": True,
        "level": "INFO",
        "keep_days": 14,
        "max_size_mb": 10,
        "backup_count": 3,
        "modules": {
            "app": {"enabled": True},
            "queue": {"enabled": True},
            "ledger": {"enabled": True},
            "errors": {"enabled": True},
        },
    },
}

logger = logging.getLogger("app")


def _deep_merge(base: dict, override: dict) -> dict:
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Lädt config.yaml und legt sie über die Defaults.

    Fehlt die Datei, gelten nur die Defaults. Umgebungsvariablen
    (PRINTQUEUE_DB_PATH) überschreiben die Datei.
    """
    config_path = Path(path) if path else CONFIG_PATH
    file_cfg: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            file_cfg = yaml.safe_load(f) or {}
        if not isinstance(file_cfg, dict):
            logger.warning("config.yaml hat kein Mapping auf oberster Ebene, verwende Defaults")
            file_cfg = {}

    config = _deep_merge(DEFAULT_CONFIG, file_cfg)

    db_path = os.getenv("PRINTQUEUE_DB_PATH")
    if db_path:
        config["database"]["path"] = db_path
    return config


def get_logging_config(config: Dict[str, Any]) -> Dict[str, Any]:
    logging_cfg = config.get("logging", {})
    return {
        "enabled": logging_cfg.get("enabled", True),
        "level": logging_cfg.get("level", "INFO"),
        "keep_days": logging_cfg.get("keep_days", 14),
        "max_size_mb": logging_cfg.get("max_size_mb", 10),
        "backup_count": logging_cfg.get("backup_count", 3),
        "modules": logging_cfg.get("modules", {}),
    }


def get_server_bind(config: Dict[str, Any]) -> Tuple[str, int]:
    host = os.getenv("HOST") or config.get("server", {}).get("host") or "0.0.0.0"
    port_val = os.getenv("PORT") or config.get("server", {}).get("port") or 3001
    try:
        port = int(port_val)
    except (TypeError, ValueError):
        port = 3001
    return host, port


def get_db_path(config: Dict[str, Any]) -> str:
    return config.get("database", {}).get("path") or DEFAULT_CONFIG["database"]["path"]
