from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple


def _is_truthy(v: str | None) -> bool:
    if v is None:
        return False
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        raw = str(os.environ.get(name, "") or "").strip()
        return int(raw) if raw else int(default)
    except Exception:
        return int(default)


@dataclass(frozen=True)
class ApiConfig:
    mode: str  # "dev" | "testnet" | "prod"
    max_request_bytes: int
    log_requests: bool
    events_page_max: int
    cors_origins: Tuple[str, ...]


def _parse_cors_origins(mode: str) -> Tuple[str, ...]:
    """CORS allowlist. Unset means disabled; "*" is refused in prod."""
    raw = os.environ.get("TAPCOIN_CORS_ORIGINS", "").strip()
    if not raw:
        return ()

    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    if "*" in origins:
        if mode == "prod":
            raise RuntimeError(
                "Unsafe CORS configuration: wildcard '*' not allowed in production. "
                "Set explicit origins in TAPCOIN_CORS_ORIGINS."
            )
        return ("*",)
    return origins


def load_api_config() -> ApiConfig:
    mode = os.getenv("TAPCOIN_MODE", "prod").strip().lower()
    return ApiConfig(
        mode=mode,
        max_request_bytes=max(1, _env_int("TAPCOIN_MAX_REQUEST_BYTES", 64_000)),
        log_requests=_is_truthy(os.getenv("TAPCOIN_LOG_REQUESTS", "1")),
        events_page_max=max(1, _env_int("TAPCOIN_EVENTS_PAGE_MAX", 500)),
        cors_origins=_parse_cors_origins(mode),
    )
