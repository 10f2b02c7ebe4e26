from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from tapcoin.ledger.constants import MAX_SUPPLY, VOTING_PERIOD_SECONDS
from tapcoin.runtime.chain_config import (
    chain_config_from_dict,
    default_chain_config,
    genesis_params,
    load_chain_config,
    validate_chain_config,
)

_ENV_KEYS = (
    "TAPCOIN_CHAIN_CONFIG_PATH",
    "TAPCOIN_CHAIN_ID",
    "TAPCOIN_MODE",
    "TAPCOIN_DB_PATH",
    "TAPCOIN_ADMIN_ACCOUNT",
    "TAPCOIN_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for k in _ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults_are_valid_and_prod() -> None:
    cfg = default_chain_config()
    validate_chain_config(cfg)
    assert cfg.mode == "prod"
    assert cfg.max_supply == MAX_SUPPLY
    assert cfg.burn_rate_bps == 100
    assert cfg.voting_period_s == VOTING_PERIOD_SECONDS
    assert cfg.default_secondary_currency == "USDC"


def test_genesis_params_from_config() -> None:
    params = genesis_params(default_chain_config())
    assert params["admin"] == "ADMIN"
    assert params["contract_account"] == "CONTRACT"
    assert params["paused"] is False


@pytest.mark.parametrize(
    "raw",
    [
        {"mode": "yolo"},
        {"burn_rate_bps": 10_001},
        {"burn_rate_bps": -1},
        {"admin_account": "X", "contract_account": "X"},
        {"max_supply": 10, "genesis_allocations": {"a": 6, "b": 5}},
        {"genesis_allocations": {"a": -1}},
        {"api_port": 70_000},
        {"voting_period_s": -5},
    ],
)
def test_invalid_configs_fail_fast(raw) -> None:
    with pytest.raises(ValueError):
        chain_config_from_dict(raw)


def test_validate_rejects_blank_chain_id() -> None:
    with pytest.raises(ValueError):
        validate_chain_config(replace(default_chain_config(), chain_id="  "))


def test_load_from_json_file(tmp_path: Path, monkeypatch) -> None:
    p = tmp_path / "chain.json"
    p.write_text(
        json.dumps(
            {
                "chain_id": "tapcoin-file",
                "mode": "testnet",
                "db_path": "",
                "genesis_allocations": {"CONTRACT": 1_000},
                "log_level": "debug",
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("TAPCOIN_CHAIN_CONFIG_PATH", str(p))

    cfg = load_chain_config()
    assert cfg.chain_id == "tapcoin-file"
    assert cfg.mode == "testnet"
    assert cfg.db_path == ""
    assert cfg.genesis_allocations == {"CONTRACT": 1_000}
    assert cfg.log_level == "DEBUG"


def test_non_object_config_file_rejected(tmp_path: Path) -> None:
    p = tmp_path / "chain.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_chain_config(config_path=str(p))


def test_env_overrides_without_file(monkeypatch) -> None:
    monkeypatch.setenv("TAPCOIN_CHAIN_ID", "tapcoin-env")
    monkeypatch.setenv("TAPCOIN_MODE", "DEV")
    monkeypatch.setenv("TAPCOIN_DB_PATH", "")
    monkeypatch.setenv("TAPCOIN_ADMIN_ACCOUNT", "root")

    cfg = load_chain_config()
    assert cfg.chain_id == "tapcoin-env"
    assert cfg.mode == "dev"
    assert cfg.db_path == ""
    assert cfg.admin_account == "root"
