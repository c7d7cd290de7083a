import logging

import pytest

from printqueue.config import DEFAULT_CONFIG, get_logging_config
from printqueue.logging.runtime import LOG_FILE_NAME, reconfigure_logging


@pytest.fixture(autouse=True)
def reset_logging(tmp_path):
    yield
    # Handler wieder abbauen, damit andere Tests nicht in tmp_path loggen
    reconfigure_logging({"enabled": False}, log_dir=tmp_path, console=False)
    for name in ("app", "queue", "ledger", "errors"):
        logging.getLogger(name).disabled = False
        logging.getLogger(name).setLevel(logging.NOTSET)
    logging.getLogger().setLevel(logging.WARNING)


def test_reconfigure_writes_module_logs(tmp_path):
    statuses = reconfigure_logging(get_logging_config(DEFAULT_CONFIG), log_dir=tmp_path, console=False)

    assert statuses == {"app": True, "queue": True, "ledger": True, "errors": True}
    logging.getLogger("queue").info("Auftrag JOB-000001 angelegt")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "Auftrag JOB-000001 angelegt" in content
    assert "[INFO] queue" in content


def test_disabled_module_is_silenced(tmp_path):
    cfg = get_logging_config(DEFAULT_CONFIG)
    cfg["modules"] = {"ledger": {"enabled": False}}

    statuses = reconfigure_logging(cfg, log_dir=tmp_path, console=False)

    assert statuses["ledger"] is False
    assert statuses["queue"] is True
    assert logging.getLogger("ledger").disabled


def test_logging_disabled_globally(tmp_path):
    statuses = reconfigure_logging({"enabled": False}, log_dir=tmp_path / "off", console=False)
    assert not any(statuses.values())
    assert not (tmp_path / "off").exists()


def test_reconfigure_replaces_handlers(tmp_path):
    cfg = get_logging_config(DEFAULT_CONFIG)
    reconfigure_logging(cfg, log_dir=tmp_path, console=False)
    before = len(logging.getLogger().handlers)
    reconfigure_logging(cfg, log_dir=tmp_path, console=False)
    assert len(logging.getLogger().handlers) == before
