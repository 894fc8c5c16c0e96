import pytest

import users_cli
from userpager import config
from userpager.db import get_db_path


def test_cli_add_and_show(tmp_db_path, capsys):
    assert users_cli.main(["--db", tmp_db_path, "add-user", "--name", "Ann", "--age", "33", "--country", "Peru"]) == 0
    assert users_cli.main(["--db", tmp_db_path, "add-user", "--name", "Ben", "--age", "22", "--country", "Chile",
                           "--status", "Active"]) == 0
    capsys.readouterr()

    assert users_cli.main(["--db", tmp_db_path, "show", "--order", "age:desc"]) == 0
    out = capsys.readouterr().out
    assert "Name" in out
    assert out.index("Ann") < out.index("Ben")

    assert users_cli.main(["--db", tmp_db_path, "show", "--status", "ACTIVE"]) == 0
    out = capsys.readouterr().out
    assert "Ben" in out and "Ann" not in out

    assert users_cli.main(["--db", tmp_db_path, "show", "--page", "2", "--page-size", "1", "--order", "name"]) == 0
    out = capsys.readouterr().out
    assert "Ben" in out and "Ann" not in out


def test_cli_rejects_bad_order(tmp_db_path, capsys):
    assert users_cli.main(["--db", tmp_db_path, "show", "--order", "age:sideways"]) == 2
    assert "Invalid order direction" in capsys.readouterr().err


def test_port_resolution(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert config.get_port({}) == 8080
    assert config.get_port({"port": 9000}) == 9000
    monkeypatch.setenv("PORT", "7000")
    assert config.get_port({"port": 9000}) == 7000


def test_log_level_resolution(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert config.get_log_level({}) == "INFO"
    assert config.get_log_level({"log_level": "debug"}) == "DEBUG"
    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert config.get_log_level({"log_level": "debug"}) == "WARNING"


def test_db_path_resolution(monkeypatch, tmp_path):
    monkeypatch.delenv("USERS_DB_PATH", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    target = tmp_path / "sub" / "prod.db"
    assert get_db_path({"db_path": str(target)}) == str(target)
    assert target.parent.is_dir()

    # running under pytest selects test_db_path when present
    test_target = tmp_path / "t.db"
    assert get_db_path({"db_path": str(target), "test_db_path": str(test_target)}) == str(test_target)

    monkeypatch.setenv("USERS_DB_PATH", str(tmp_path / "env.db"))
    assert get_db_path({"db_path": str(target)}) == str(tmp_path / "env.db")


def test_read_config_yaml(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("port: 9100\ndb_path: ./data/users.db\n", encoding="utf-8")
    assert config.read_config_yaml(str(cfg)) == {"port": 9100, "db_path": "./data/users.db"}
    assert config.read_config_yaml(str(tmp_path / "nope.yaml")) == {}
