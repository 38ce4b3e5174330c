"""Settings loaded from the environment, a .env file, and an optional YAML file."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import dotenv_values

from rooty.errors import ConfigError

DEFAULT_DB_PATH = str(Path.home() / ".rooty" / "rooty.db")

DEFAULTS = {
    "batch_size": 10,
    "load_timeout": 10.0,
    "advance_delay": 2.0,
    "completion_delay": 2.0,
    "challenge_count": 4,
    "challenge_theme": "Christmas Special",
    "http_timeout": 15.0,
}


@dataclass
class Settings:
    supabase_url: str
    supabase_anon_key: str
    supabase_service_key: str = ""
    db_path: str = DEFAULT_DB_PATH
    log_level: str = "WARNING"
    batch_size: int = 10
    load_timeout: float = 10.0
    advance_delay: float = 2.0
    completion_delay: float = 2.0
    challenge_count: int = 4
    challenge_theme: str = "Christmas Special"
    http_timeout: float = 15.0


def load_settings(config_path: str = "rooty.yaml", env_path: str = ".env") -> Settings:
    raw_env = dotenv_values(env_path) if Path(env_path).exists() else {}
    env = {str(k).lstrip("\ufeff"): (v or "") for k, v in raw_env.items()}

    def get_env(name: str, default: str = "") -> str:
        # Process environment overrides .env file.
        v = os.getenv(name)
        if v is not None and v != "":
            return v.strip()
        return str(env.get(name, default)).replace("\ufeff", "").strip()

    cfg = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        if not isinstance(cfg, dict):
            raise ConfigError(f"{config_path} must contain a mapping of settings")
    prefs = {**DEFAULTS, **{k: v for k, v in cfg.items() if k in DEFAULTS}}

    url = get_env("ROOTY_SUPABASE_URL")
    anon_key = get_env("ROOTY_SUPABASE_ANON_KEY")
    if not url or not anon_key:
        raise ConfigError(
            "Missing backend credentials. Please set ROOTY_SUPABASE_URL and "
            "ROOTY_SUPABASE_ANON_KEY in your environment or .env file"
        )

    try:
        return Settings(
            supabase_url=url.rstrip("/"),
            supabase_anon_key=anon_key,
            supabase_service_key=get_env("ROOTY_SUPABASE_SERVICE_KEY"),
            db_path=get_env("ROOTY_DB_PATH", cfg.get("db_path") or DEFAULT_DB_PATH),
            log_level=get_env("ROOTY_LOG_LEVEL", "WARNING").upper(),
            batch_size=int(prefs["batch_size"]),
            load_timeout=float(prefs["load_timeout"]),
            advance_delay=float(prefs["advance_delay"]),
            completion_delay=float(prefs["completion_delay"]),
            challenge_count=int(prefs["challenge_count"]),
            challenge_theme=str(prefs["challenge_theme"]),
            http_timeout=float(prefs["http_timeout"]),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in {config_path}: {e}") from e
