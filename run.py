import logging

import uvicorn
from dotenv import load_dotenv

# .env früh laden, damit ADMIN_PASSWORD_HASH & Co. beim Import der App da sind
load_dotenv(override=True)

from printqueue.config import get_logging_config, get_server_bind, load_config  # noqa: E402
from printqueue.logging.runtime import reconfigure_logging  # noqa: E402

config = load_config()
module_status = reconfigure_logging(get_logging_config(config))

app_logger = logging.getLogger("app")
app_logger.info("PrintQueue Logging-System initialisiert.")
app_logger.info("Aktive Log-Module: %s", module_status)


# Development reload nur über die CLI:
# uvicorn printqueue.main:app --reload --port 3001
def start():
    host, port = get_server_bind(config)
    app_logger.info("Starting PrintQueue on %s:%s", host, port)
    try:
        uvicorn.run(
            "printqueue.main:app",
            host=host,
            port=port,
            reload=False,
            log_level="info",
            # Handler kommen aus reconfigure_logging, nicht aus uvicorns dictConfig
            log_config=None,
        )
    except OSError as exc:
        if exc.errno in (98, 10048):
            app_logger.error("Port %s already in use. Set PORT env to a free port or stop the other process.", port)
            return
        raise


if __name__ == "__main__":
    start()
