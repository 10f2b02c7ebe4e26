# src/tapcoin/ledger/constants.py
from __future__ import annotations

"""Genesis monetary and governance constants.

- Fixed supply cap: 1,000,000,000 TAP, divisible to 1e-18
- Transfer burn expressed in basis points (1 bp = 0.01%)
- Proposals vote for three days
"""

# Monetary precision (1 TAP = 1e-18 units)
COIN_DECIMALS: int = 18
COIN: int = 10**COIN_DECIMALS

# Supply cap: 1,000,000,000 TAP
MAX_SUPPLY_TAP: int = 1_000_000_000
MAX_SUPPLY: int = MAX_SUPPLY_TAP * COIN

# Burn rate denominator (basis points)
BPS_DENOMINATOR: int = 10_000
DEFAULT_BURN_RATE_BPS: int = 100  # 1%

# Governance voting window
VOTING_PERIOD_SECONDS: int = 3 * 24 * 60 * 60

# Governance command prefix recognised in proposal descriptions
SET_DEFAULT_SECONDARY_COIN_PREFIX: str = "SET_DEFAULT_SECONDARY_COIN:"

DEFAULT_SECONDARY_CURRENCY: str = "USDC"

# Canonical identities in state["accounts"]
CONTRACT_ACCOUNT_ID: str = "CONTRACT"
ADMIN_ACCOUNT_ID: str = "ADMIN"
