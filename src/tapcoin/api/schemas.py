from __future__ import annotations

"""Pydantic request schemas for the public API.

Per-tx payload schemas live in tapcoin.runtime.tx_schema; this module only
shapes the HTTP envelope.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class TxSubmitRequest(BaseModel):
    tx_type: str = Field(..., description="Canon tx type, e.g. TRANSFER")
    signer: str = Field(..., description="Caller account id")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Tx-type specific payload")

    model_config = {"extra": "forbid"}

    def to_envelope(self) -> Dict[str, Any]:
        return {"tx_type": self.tx_type, "signer": self.signer, "payload": dict(self.payload)}
