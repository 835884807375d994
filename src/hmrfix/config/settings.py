from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    e2b_api_key: str | None = os.getenv("E2B_API_KEY")
    sandbox_workdir: str | None = os.getenv("SANDBOX_WORKDIR")
    preview_domain: str = os.getenv("PREVIEW_DOMAIN", "e2b.dev")
    api_base_url: str = os.getenv("API_BASE_URL", "http://localhost:3001")
    poll_interval_ms: int = int(os.getenv("POLL_INTERVAL_MS", "2000"))
    fix_cooldown_ms: int = int(os.getenv("FIX_COOLDOWN_MS", "10000"))
    fix_command_timeout_ms: int = int(os.getenv("FIX_COMMAND_TIMEOUT_MS", "30000"))
    headless: bool = _env_bool("HEADLESS", True)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def preview_url(sandbox_id: str, port: int, domain: str | None = None) -> str:
    """Public URL of a port exposed by an E2B sandbox."""
    return f"https://{sandbox_id}-{port}.{domain or settings.preview_domain}"


settings = Settings()
