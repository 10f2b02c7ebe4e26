from __future__ import annotations

"""Transaction payload schemas.

Strict pydantic models for every canon TxType (see tapcoin/tx/tx_canon.yaml).
Validation runs at admission, before a tx reaches the apply layer.

Apply-layer code still enforces semantics. These schemas are early shape checks
(types/required keys/unknown keys) so malformed payloads never reach state
transitions. Strict types are used throughout: "5" is not an amount.
"""

from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

from tapcoin.ledger.constants import BPS_DENOMINATOR

Json = Dict[str, Any]


class _StrictModel(BaseModel):
    """Strict model: reject unknown keys."""

    model_config = ConfigDict(extra="forbid")


class MintPayload(_StrictModel):
    to: StrictStr = Field(..., min_length=1)
    amount: StrictInt = Field(..., ge=0)


class BurnPayload(_StrictModel):
    amount: StrictInt = Field(..., ge=0)


class EmptyPayload(_StrictModel):
    pass


class BurnRateSetPayload(_StrictModel):
    burn_rate_bps: StrictInt = Field(..., ge=0, le=BPS_DENOMINATOR)


class TransferPayload(_StrictModel):
    recipient: StrictStr = Field(..., min_length=1)
    amount: StrictInt = Field(..., ge=0)


class AutomateSalePayload(_StrictModel):
    # Opaque strings; nothing is converted.
    user: StrictStr
    asset: StrictStr
    amount: StrictStr
    target_currency: StrictStr


class GovProposalCreatePayload(_StrictModel):
    description: StrictStr


class GovVoteCastPayload(_StrictModel):
    proposal_id: StrictInt = Field(..., ge=1)
    support: StrictBool


class GovExecutePayload(_StrictModel):
    proposal_id: StrictInt = Field(..., ge=1)


class TapToPayPayload(_StrictModel):
    recipient: StrictStr = Field(..., min_length=1)
    amount: StrictInt = Field(..., ge=0)
    secondary_coin_label: StrictStr


Schema = Type[BaseModel]

_SCHEMAS: Dict[str, Schema] = {
    "MINT": MintPayload,
    "BURN": BurnPayload,
    "PAUSE": EmptyPayload,
    "UNPAUSE": EmptyPayload,
    "BURN_RATE_SET": BurnRateSetPayload,
    "TRANSFER": TransferPayload,
    "AUTOMATE_SALE": AutomateSalePayload,
    "GOV_PROPOSAL_CREATE": GovProposalCreatePayload,
    "GOV_VOTE_CAST": GovVoteCastPayload,
    "GOV_EXECUTE": GovExecutePayload,
    "TAP_TO_PAY": TapToPayPayload,
}


def _schema_for(tx_type: str) -> Optional[Schema]:
    return _SCHEMAS.get(str(tx_type).strip().upper())


def validate_payload(*, tx_type: str, payload: Any) -> Tuple[bool, str, str, Optional[Dict[str, Any]]]:
    """Validate payload against schema.

    Returns: (ok, code, reason, details)
    """
    sch = _schema_for(tx_type)
    if sch is None:
        return False, "invalid_tx", "no_schema_for_tx_type", {"tx_type": tx_type}

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return False, "invalid_payload", "payload_must_be_object", {"type": type(payload).__name__}

    try:
        sch.model_validate(payload)
        return True, "", "", None
    except ValidationError as ve:
        errors = [
            {"loc": [str(x) for x in e.get("loc", ())], "type": str(e.get("type", "")), "msg": str(e.get("msg", ""))}
            for e in ve.errors()
        ]
        return False, "invalid_payload", "payload_schema_mismatch", {"errors": errors}


__all__ = ["validate_payload"]
