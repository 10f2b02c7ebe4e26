# src/tapcoin/tx/canon.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TypedDict

import yaml


class CanonError(RuntimeError):
    pass


class CanonTxType(TypedDict, total=False):
    """
    Canonical TxType entry.

    total=False so we can carry extra forward-compatible fields
    while validating required fields at load-time.
    """
    id: int
    name: str
    domain: str
    gate: str  # "admin" | "any"
    pausable: bool
    notes: str


_ALLOWED_GATES = {"admin", "any"}

DEFAULT_CANON_PATH = Path(__file__).resolve().parent / "tx_canon.yaml"


@dataclass(frozen=True)
class TxIndex:
    """Normalized TxType index keyed by name and id."""

    tx_types: List[CanonTxType]
    by_name: Dict[str, CanonTxType]
    by_id: Dict[int, CanonTxType]
    meta: Dict[str, Any]
    source_sha256: str

    def get(self, name: str) -> Optional[CanonTxType]:
        return self.by_name.get(str(name).strip().upper())

    def get_by_id(self, tx_id: int) -> Optional[CanonTxType]:
        return self.by_id.get(int(tx_id))

    def names(self) -> List[str]:
        return [t["name"] for t in self.tx_types]

    @classmethod
    def load_from_file(cls, path: str | Path = DEFAULT_CANON_PATH) -> "TxIndex":
        return load_tx_index_yaml(path)


def _sha256_bytes(data: bytes) -> str:
    h = hashlib.sha256()
    h.update(data)
    return h.hexdigest()


def _validate_entry(tx: Any) -> CanonTxType:
    if not isinstance(tx, dict):
        raise CanonError("tx entry must be an object")

    name = tx.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CanonError("tx entry 'name' must be non-empty string")

    tx_id = tx.get("id")
    if isinstance(tx_id, bool) or not isinstance(tx_id, int):
        raise CanonError(f"tx '{name}' id must be int")

    gate = str(tx.get("gate") or "any").strip().lower()
    if gate not in _ALLOWED_GATES:
        raise CanonError(f"tx '{name}' gate must be one of {sorted(_ALLOWED_GATES)}; got: {gate!r}")

    out: CanonTxType = dict(tx)  # type: ignore[assignment]
    out["name"] = name.strip().upper()
    out["gate"] = gate
    out["pausable"] = bool(tx.get("pausable", False))
    out["domain"] = str(tx.get("domain") or "").strip()
    return out


def load_tx_index_yaml(path: str | Path = DEFAULT_CANON_PATH) -> TxIndex:
    """Load the YAML canon and return a normalized index."""
    p = Path(path)
    if not p.is_file():
        raise CanonError(f"canon artifact not found: {p}")

    raw = p.read_bytes()
    try:
        obj = yaml.safe_load(raw.decode("utf-8"))
    except yaml.YAMLError as e:
        raise CanonError(f"failed to parse tx canon: {e}") from e

    if not isinstance(obj, dict) or not isinstance(obj.get("tx_types"), list):
        raise CanonError("tx canon must be a mapping with a 'tx_types' list")

    by_name: Dict[str, CanonTxType] = {}
    by_id: Dict[int, CanonTxType] = {}
    tx_list: List[CanonTxType] = []

    for entry in obj["tx_types"]:
        tx = _validate_entry(entry)
        name = tx["name"]
        tx_id = int(tx["id"])

        if name in by_name:
            raise CanonError(f"duplicate tx name in canon: {name}")
        if tx_id in by_id:
            raise CanonError(f"duplicate tx id in canon: {tx_id}")

        by_name[name] = tx
        by_id[tx_id] = tx
        tx_list.append(tx)

    tx_list.sort(key=lambda x: int(x["id"]))
    meta = {k: v for k, v in obj.items() if k != "tx_types"}
    meta["_source"] = str(p)

    return TxIndex(
        tx_types=tx_list,
        by_name=by_name,
        by_id=by_id,
        meta=meta,
        source_sha256=_sha256_bytes(raw),
    )


__all__ = ["CanonError", "CanonTxType", "DEFAULT_CANON_PATH", "TxIndex", "load_tx_index_yaml"]
