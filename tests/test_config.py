from printqueue.config import DEFAULT_CONFIG, get_db_path, get_logging_config, get_server_bind, load_config


def test_load_config_without_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("PRINTQUEUE_DB_PATH", raising=False)
    config = load_config(tmp_path / "missing.yaml")
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG


def test_load_config_merges_file_over_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("PRINTQUEUE_DB_PATH", raising=False)
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        "server:\n  port: 8080\nlogging:\n  level: DEBUG\n  modules:\n    ledger:\n      enabled: false\n",
        encoding="utf-8",
    )

    config = load_config(cfg_file)

    assert config["server"] == {"host": "0.0.0.0", "port": 8080}
    assert config["logging"]["level"] == "DEBUG"
    assert config["logging"]["modules"]["ledger"] == {"enabled": False}
    assert config["logging"]["modules"]["queue"] == {"enabled": True}
    assert DEFAULT_CONFIG["server"]["port"] == 3001


def test_load_config_ignores_non_mapping(tmp_path, monkeypatch):
    monkeypatch.delenv("PRINTQUEUE_DB_PATH", raising=False)
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("- nur\n- eine liste\n", encoding="utf-8")
    assert load_config(cfg_file) == DEFAULT_CONFIG


def test_db_path_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PRINTQUEUE_DB_PATH", str(tmp_path / "override.db"))
    config = load_config(tmp_path / "missing.yaml")
    assert get_db_path(config) == str(tmp_path / "override.db")


def test_server_bind_env_override(monkeypatch):
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9000")
    assert get_server_bind(DEFAULT_CONFIG) == ("127.0.0.1", 9000)

    monkeypatch.setenv("PORT", "kein-port")
    assert get_server_bind(DEFAULT_CONFIG) == ("127.0.0.1", 3001)


def test_get_logging_config_fills_missing_keys():
    logging_cfg = get_logging_config({"logging": {"level": "WARNING"}})
    assert logging_cfg["level"] == "WARNING"
    assert logging_cfg["enabled"] is True
    assert logging_cfg["backup_count"] == 3
    assert logging_cfg["modules"] == {}
