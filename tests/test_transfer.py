from __future__ import annotations

import pytest

from conftest import tx
from tapcoin.runtime.errors import ApplyError


def test_transfer_burns_one_percent_and_leaves_burned_counter(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    out = ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=100))

    view = ex.ledger_view()
    assert view.balance_of("alice") == 900
    assert view.balance_of("bob") == 99
    assert view.total_supply == 999
    # Transfer-time burns are not counted in total_burned_tokens.
    assert view.total_burned_tokens == 0

    res = out["result"]
    assert (res["amount"], res["burned"], res["net"]) == (100, 1, 99)
    assert [e["event"] for e in out["events"]] == ["transfer_completed", "activity"]
    done = out["events"][0]
    assert (done["sender"], done["recipient"], done["burned"], done["net"]) == ("alice", "bob", 1, 99)


def test_small_transfer_rounds_burn_down_to_zero(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    out = ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=99))
    assert out["result"]["burned"] == 0
    assert ex.ledger_view().balance_of("bob") == 99


def test_transfer_uses_current_burn_rate(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    ex.submit_tx(tx("BURN_RATE_SET", "ADMIN", burn_rate_bps=1000))
    ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=200))
    assert ex.ledger_view().balance_of("bob") == 180
    assert ex.ledger_view().total_supply == 980


def test_transfer_insufficient_balance_changes_nothing(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 50})
    before = ex.read_state()

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=51))
    assert e.value.code == "forbidden"
    assert e.value.reason == "insufficient_balance"
    assert ex.read_state() == before


def test_zero_amount_transfer_is_allowed(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 50})
    out = ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount=0))
    assert out["result"]["net"] == 0
    assert ex.ledger_view().balance_of("alice") == 50


def test_self_transfer_still_pays_burn(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    ex.submit_tx(tx("TRANSFER", "alice", recipient="alice", amount=500))
    assert ex.ledger_view().balance_of("alice") == 995
    assert ex.ledger_view().total_supply == 995


def test_string_amount_rejected_at_admission(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("TRANSFER", "alice", recipient="bob", amount="5"))
    assert e.value.code == "invalid_payload"
    assert e.value.reason == "payload_schema_mismatch"


def test_automate_sale_only_notifies(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 1000})
    before = ex.ledger_view()

    out = ex.submit_tx(
        tx("AUTOMATE_SALE", "alice", user="alice", asset="TAP", amount="25", target_currency="USDC")
    )

    after = ex.ledger_view()
    assert after.accounts == before.accounts
    assert after.total_supply == before.total_supply
    assert [e["event"] for e in out["events"]] == ["sale_automated", "activity"]
    assert out["events"][0]["target_currency"] == "USDC"


def test_automate_sale_rejected_while_paused(make_executor) -> None:
    ex = make_executor()
    ex.submit_tx(tx("PAUSE", "ADMIN"))
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("AUTOMATE_SALE", "alice", user="alice", asset="TAP", amount="1", target_currency="USDC"))
    assert e.value.reason == "contract_paused"
