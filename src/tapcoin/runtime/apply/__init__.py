# src/tapcoin/runtime/apply/__init__.py
"""Domain-specific apply modules.

Each module implements ledger state transitions for a subset of tx types and
returns None for tx types it does not own. runtime.domain_dispatch routes to
them in order.

NOTE: Keep this package import-safe (no imports that require domain_dispatch).
"""

from __future__ import annotations

__all__ = [
    "access",
    "governance",
    "ledger",
    "payments",
    "supply",
    "transfer",
]
