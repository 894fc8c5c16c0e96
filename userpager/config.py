from __future__ import annotations

# userpager/config.py
import os
import yaml

# Resolution order for every setting:
# 1) environment variable
# 2) config.yaml at the project root
# 3) built-in default
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.yaml")

DEFAULT_PORT = 8080
DEFAULT_DB_FILE = "users.db"
DEFAULT_LOG_LEVEL = "INFO"


def read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or os.environ.get("USERS_CONFIG") or CONFIG_PATH
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        return {}
    return cfg


def is_test_env() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def get_port(cfg: dict | None = None) -> int:
    env_port = os.environ.get("PORT")
    if env_port:
        return int(env_port)
    cfg = read_config_yaml() if cfg is None else cfg
    port = cfg.get("port")
    return int(port) if port else DEFAULT_PORT


def get_log_level(cfg: dict | None = None) -> str:
    env_level = os.environ.get("LOG_LEVEL")
    if env_level:
        return env_level.upper()
    cfg = read_config_yaml() if cfg is None else cfg
    level = cfg.get("log_level")
    return str(level).upper() if level else DEFAULT_LOG_LEVEL
