from __future__ import annotations

import pytest

from conftest import tx
from tapcoin.ledger.constants import BPS_DENOMINATOR, MAX_SUPPLY
from tapcoin.runtime.apply.supply import compute_transfer_burn
from tapcoin.runtime.domain_dispatch import apply_tx
from tapcoin.runtime.errors import ApplyError


def _bal(ex, account: str) -> int:
    return ex.ledger_view().balance_of(account)


def test_default_cap_is_one_billion_whole_tokens(make_executor) -> None:
    ex = make_executor()
    assert ex.ledger_view().get_param("max_supply") == MAX_SUPPLY
    assert MAX_SUPPLY == 1_000_000_000 * 10**18


def test_admin_mint_credits_recipient_and_supply(make_executor) -> None:
    ex = make_executor()
    out = ex.submit_tx(tx("MINT", "ADMIN", to="alice", amount=500))

    assert out["ok"] is True
    assert _bal(ex, "alice") == 500
    assert ex.ledger_view().total_supply == 500
    assert [e["event"] for e in out["events"]] == ["tokens_minted"]
    assert out["events"][0]["to"] == "alice"
    assert out["events"][0]["amount"] == 500


def test_mint_up_to_cap_then_cap_exceeded(make_executor) -> None:
    ex = make_executor(max_supply=1000)
    ex.submit_tx(tx("MINT", "ADMIN", to="alice", amount=600))

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("MINT", "ADMIN", to="bob", amount=401))
    assert e.value.code == "forbidden"
    assert e.value.reason == "cap_exceeded"
    assert ex.ledger_view().total_supply == 600
    assert _bal(ex, "bob") == 0

    ex.submit_tx(tx("MINT", "ADMIN", to="bob", amount=400))
    assert ex.ledger_view().total_supply == 1000


def test_mint_by_non_admin_is_unauthorized(make_executor) -> None:
    ex = make_executor()
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("MINT", "mallory", to="mallory", amount=1))
    assert e.value.reason == "unauthorized"
    assert ex.ledger_view().total_supply == 0


def test_apply_layer_rechecks_admin_without_admission() -> None:
    st = {"params": {"admin": "ADMIN", "max_supply": 100}, "accounts": {}}
    with pytest.raises(ApplyError) as e:
        apply_tx(st, tx("MINT", "mallory", to="mallory", amount=1))
    assert e.value.reason == "unauthorized"


def test_burn_reduces_balance_supply_and_counts_burned(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 100})
    out = ex.submit_tx(tx("BURN", "alice", amount=30))

    view = ex.ledger_view()
    assert view.balance_of("alice") == 70
    assert view.total_supply == 70
    assert view.total_burned_tokens == 30
    assert out["events"][0]["event"] == "tokens_burned"


def test_burn_more_than_balance_rejected(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("BURN", "alice", amount=11))
    assert e.value.reason == "insufficient_balance"
    assert e.value.code == "forbidden"
    assert e.value.details == {"account": "alice", "balance": 10, "amount": 11}
    assert _bal(ex, "alice") == 10
    assert ex.ledger_view().total_burned_tokens == 0


def test_compute_transfer_burn_floors() -> None:
    assert compute_transfer_burn(100, 100) == (1, 99)
    assert compute_transfer_burn(99, 100) == (0, 99)
    assert compute_transfer_burn(10_000, 250) == (250, 9_750)
    assert compute_transfer_burn(0, 100) == (0, 0)
    assert compute_transfer_burn(77, 0) == (0, 77)
    assert compute_transfer_burn(77, BPS_DENOMINATOR) == (77, 0)


def test_compute_transfer_burn_rejects_bad_inputs() -> None:
    with pytest.raises(ValueError):
        compute_transfer_burn(1, BPS_DENOMINATOR + 1)
    with pytest.raises(ValueError):
        compute_transfer_burn(-1, 100)


def test_burn_rate_set_is_admin_only_and_bounded(make_executor) -> None:
    ex = make_executor()

    out = ex.submit_tx(tx("BURN_RATE_SET", "ADMIN", burn_rate_bps=250))
    assert ex.ledger_view().get_param("burn_rate_bps") == 250
    assert out["events"][0]["previous"] == 100

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("BURN_RATE_SET", "alice", burn_rate_bps=0))
    assert e.value.reason == "unauthorized"

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("BURN_RATE_SET", "ADMIN", burn_rate_bps=BPS_DENOMINATOR + 1))
    assert e.value.reason == "payload_schema_mismatch"
    assert ex.ledger_view().get_param("burn_rate_bps") == 250


def test_burn_rate_bound_enforced_at_apply_layer() -> None:
    st = {"params": {"admin": "ADMIN", "burn_rate_bps": 100}, "accounts": {}}
    with pytest.raises(ApplyError) as e:
        apply_tx(st, tx("BURN_RATE_SET", "ADMIN", burn_rate_bps=20_000))
    assert e.value.reason == "bad_burn_rate"
    assert st["params"]["burn_rate_bps"] == 100


def test_pause_blocks_transfers_but_not_mint(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 100})
    ex.submit_tx(tx("PAUSE", "ADMIN"))
    assert ex.ledger_view().is_paused() is True

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=10))
    assert e.value.reason == "contract_paused"

    ex.submit_tx(tx("MINT", "ADMIN", to="bob", amount=5))
    assert _bal(ex, "bob") == 5

    ex.submit_tx(tx("UNPAUSE", "ADMIN"))
    ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=10))
    assert _bal(ex, "alice") == 90


def test_pause_toggle_rules(make_executor) -> None:
    ex = make_executor()

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("PAUSE", "alice"))
    assert e.value.reason == "unauthorized"

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("UNPAUSE", "ADMIN"))
    assert e.value.reason == "pause_already_in_requested_state"

    out = ex.submit_tx(tx("PAUSE", "ADMIN"))
    assert out["events"][0]["event"] == "paused"

    with pytest.raises(ApplyError):
        ex.submit_tx(tx("PAUSE", "ADMIN"))
