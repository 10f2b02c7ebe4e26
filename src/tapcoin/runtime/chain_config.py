# src/tapcoin/runtime/chain_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from tapcoin.ledger.constants import (
    ADMIN_ACCOUNT_ID,
    BPS_DENOMINATOR,
    CONTRACT_ACCOUNT_ID,
    DEFAULT_BURN_RATE_BPS,
    DEFAULT_SECONDARY_CURRENCY,
    MAX_SUPPLY,
    VOTING_PERIOD_SECONDS,
)

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_allocations(v: Any, default: Dict[str, int]) -> Dict[str, int]:
    if not isinstance(v, dict):
        return dict(default)
    return {str(k): _as_int(amt, 0) for k, amt in v.items()}


@dataclass(frozen=True)
class ChainConfig:
    chain_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # Single SQLite DB file path for ledger persistence. Empty -> in-memory only.
    db_path: str

    admin_account: str
    contract_account: str

    max_supply: int
    burn_rate_bps: int
    default_secondary_currency: str
    voting_period_s: int

    api_host: str
    api_port: int

    log_level: str

    # Minted at genesis; counts against max_supply.
    genesis_allocations: Dict[str, int] = field(default_factory=dict)


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_chain_config(cfg: ChainConfig) -> None:
    """Fail-fast validation for operator config.

    Prevent silent misconfiguration that could put a node into an unsafe
    posture or an unusable state.
    """

    if not isinstance(cfg.chain_id, str) or not cfg.chain_id.strip():
        raise ValueError("chain_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if not str(cfg.admin_account or "").strip():
        raise ValueError("admin_account must be a non-empty string")

    if not str(cfg.contract_account or "").strip():
        raise ValueError("contract_account must be a non-empty string")

    if cfg.admin_account.strip() == cfg.contract_account.strip():
        raise ValueError("admin_account and contract_account must differ")

    if int(cfg.max_supply) <= 0:
        raise ValueError(f"max_supply must be > 0; got: {cfg.max_supply}")

    if int(cfg.burn_rate_bps) < 0 or int(cfg.burn_rate_bps) > BPS_DENOMINATOR:
        raise ValueError(f"burn_rate_bps must be 0..{BPS_DENOMINATOR}; got: {cfg.burn_rate_bps}")

    if int(cfg.voting_period_s) <= 0:
        raise ValueError(f"voting_period_s must be > 0; got: {cfg.voting_period_s}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    total = 0
    for account, amount in cfg.genesis_allocations.items():
        if not str(account).strip():
            raise ValueError("genesis_allocations keys must be non-empty account ids")
        if int(amount) < 0:
            raise ValueError(f"genesis allocation for {account!r} must be >= 0; got: {amount}")
        total += int(amount)
    if total > int(cfg.max_supply):
        raise ValueError(f"genesis_allocations total {total} exceeds max_supply {cfg.max_supply}")


def default_chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id="tapcoin-dev",
        # Production-safe default: never silently drop into a dev posture.
        mode="prod",
        db_path="./data/tapcoin.db",
        admin_account=ADMIN_ACCOUNT_ID,
        contract_account=CONTRACT_ACCOUNT_ID,
        max_supply=MAX_SUPPLY,
        burn_rate_bps=DEFAULT_BURN_RATE_BPS,
        default_secondary_currency=DEFAULT_SECONDARY_CURRENCY,
        voting_period_s=VOTING_PERIOD_SECONDS,
        api_host="0.0.0.0",
        api_port=8000,
        log_level="INFO",
        genesis_allocations={},
    )


def chain_config_from_dict(raw: Json) -> ChainConfig:
    d = default_chain_config()

    cfg = ChainConfig(
        chain_id=_as_str(raw.get("chain_id"), d.chain_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        db_path=str(raw.get("db_path", d.db_path) or ""),
        admin_account=_as_str(raw.get("admin_account"), d.admin_account),
        contract_account=_as_str(raw.get("contract_account"), d.contract_account),
        max_supply=_as_int(raw.get("max_supply"), d.max_supply),
        burn_rate_bps=_as_int(raw.get("burn_rate_bps"), d.burn_rate_bps),
        default_secondary_currency=_as_str(raw.get("default_secondary_currency"), d.default_secondary_currency),
        voting_period_s=_as_int(raw.get("voting_period_s"), d.voting_period_s),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level).upper(),
        genesis_allocations=_as_allocations(raw.get("genesis_allocations"), d.genesis_allocations),
    )

    validate_chain_config(cfg)
    return cfg


def read_chain_config_file(path: str) -> ChainConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("chain config must be a JSON object")
    return chain_config_from_dict(raw)


def load_chain_config(*, config_path: Optional[str] = None) -> ChainConfig:
    p = config_path or os.environ.get("TAPCOIN_CHAIN_CONFIG_PATH")
    if p:
        return read_chain_config_file(p)

    raw: Json = {}
    for key, env_name in (
        ("chain_id", "TAPCOIN_CHAIN_ID"),
        ("mode", "TAPCOIN_MODE"),
        ("db_path", "TAPCOIN_DB_PATH"),
        ("admin_account", "TAPCOIN_ADMIN_ACCOUNT"),
        ("log_level", "TAPCOIN_LOG_LEVEL"),
    ):
        v = os.environ.get(env_name)
        if v is not None:
            raw[key] = v
    return chain_config_from_dict(raw)


def genesis_params(cfg: ChainConfig) -> Json:
    return {
        "admin": cfg.admin_account.strip(),
        "contract_account": cfg.contract_account.strip(),
        "max_supply": int(cfg.max_supply),
        "burn_rate_bps": int(cfg.burn_rate_bps),
        "paused": False,
        "default_secondary_currency": str(cfg.default_secondary_currency),
        "voting_period_s": int(cfg.voting_period_s),
    }
