from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def is_on(name: str, default: str = "off") -> bool:
    return os.getenv(name, default).strip().casefold() == "on"


@dataclass
class Settings:
    catalog_url: str
    http_timeout_s: float
    session_ttl_s: int
    cart_enrich_concurrency: int
    state_dir: Path
    host: str
    port: int
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: Path | None = None
    log_max_bytes: int = 5_000_000
    log_backup_count: int = 5

    @property
    def log_path(self) -> Path | None:
        if not self.log_to_file:
            return None
        return (self.log_dir or self.state_dir / "logs") / "shopagent.log"

    @classmethod
    def from_env(cls) -> "Settings":
        log_dir = get_str_env("SHOPAGENT_LOG_DIR", "")
        return cls(
            catalog_url=get_str_env("SHOPAGENT_CATALOG_URL", "https://fakestoreapi.com").rstrip("/"),
            http_timeout_s=max(0.1, get_float_env("SHOPAGENT_HTTP_TIMEOUT_S", 10.0)),
            session_ttl_s=max(0, get_int_env("SHOPAGENT_SESSION_TTL_S", 0)),
            cart_enrich_concurrency=max(1, get_int_env("SHOPAGENT_CART_ENRICH_CONCURRENCY", 4)),
            state_dir=Path(get_str_env("SHOPAGENT_STATE_DIR", str(Path.home() / ".shopagent"))).expanduser(),
            host=get_str_env("SHOPAGENT_HOST", "127.0.0.1"),
            port=get_int_env("SHOPAGENT_PORT", 3001),
            log_level=get_str_env("SHOPAGENT_LOG_LEVEL", "INFO").upper(),
            log_to_file=is_on("SHOPAGENT_LOG_TO_FILE"),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
            log_max_bytes=max(1, get_int_env("SHOPAGENT_LOG_MAX_BYTES", 5_000_000)),
            log_backup_count=max(0, get_int_env("SHOPAGENT_LOG_BACKUP_COUNT", 5)),
        )
