# src/tapcoin/runtime/executor_boot.py

from __future__ import annotations

from typing import Optional

from tapcoin.runtime.chain_config import ChainConfig, load_chain_config
from tapcoin.runtime.executor import LedgerExecutor


def build_executor(cfg: Optional[ChainConfig] = None) -> LedgerExecutor:
    """
    Build a LedgerExecutor from an explicit chain config or, if omitted,
    from TAPCOIN_CHAIN_CONFIG_PATH / environment variables.

    `tapcoin.api.app` calls build_executor() with no args in production.
    """
    return LedgerExecutor(cfg or load_chain_config())
