from __future__ import annotations

import pytest

from conftest import GENESIS_TIME, tx
from tapcoin.ledger.constants import VOTING_PERIOD_SECONDS
from tapcoin.runtime.apply.governance import has_voted
from tapcoin.runtime.errors import ApplyError
from tapcoin.runtime.proposals import (
    STATUS_CLOSED_PENDING,
    STATUS_EXECUTED,
    STATUS_OPEN,
    NoOp,
    SetDefaultSecondaryCurrency,
    action_from_json,
    action_to_json,
    parse_proposal_action,
    proposal_status,
)


def _proposal(ex, pid: int) -> dict:
    return ex.read_state()["gov_proposals_by_id"][str(pid)]


def _create(ex, signer: str, description: str) -> int:
    out = ex.submit_tx(tx("GOV_PROPOSAL_CREATE", signer, description=description))
    return int(out["result"]["proposal_id"])


def test_voting_period_is_three_days() -> None:
    assert VOTING_PERIOD_SECONDS == 259_200


def test_proposal_ids_are_sequential_and_deadline_is_three_days(make_executor) -> None:
    ex = make_executor()
    assert _create(ex, "alice", "first") == 1
    assert _create(ex, "bob", "second") == 2

    pr = _proposal(ex, 1)
    assert pr["proposer"] == "alice"
    assert pr["created_at"] == GENESIS_TIME
    assert pr["deadline"] == GENESIS_TIME + VOTING_PERIOD_SECONDS
    assert (pr["yes_votes"], pr["no_votes"], pr["executed"]) == (0, 0, False)


def test_vote_weight_is_balance_and_double_vote_rejected(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 600, "bob": 300})
    pid = _create(ex, "alice", "SET_DEFAULT_SECONDARY_COIN:ETH")

    out = ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    assert out["result"]["weight"] == 600
    ex.submit_tx(tx("GOV_VOTE_CAST", "bob", proposal_id=pid, support=False))

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=False))
    assert e.value.code == "conflict"
    assert e.value.reason == "already_voted"

    pr = _proposal(ex, pid)
    assert (pr["yes_votes"], pr["no_votes"]) == (600, 300)

    st = ex.read_state()
    assert has_voted(st, pid, "alice") and has_voted(st, pid, "bob")
    assert not has_voted(st, pid, "carol")


def test_weight_is_live_balance_not_a_snapshot(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 600})
    pid = _create(ex, "alice", "anything")

    ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    # alice moves 500 to carol (net 495 after burn); carol votes again with it.
    ex.submit_tx(tx("TRANSFER", "alice", recipient="carol", amount=500))
    out = ex.submit_tx(tx("GOV_VOTE_CAST", "carol", proposal_id=pid, support=True))
    assert out["result"]["weight"] == 495

    assert _proposal(ex, pid)["yes_votes"] == 1095


def test_zero_balance_voter_records_zero_weight(make_executor) -> None:
    ex = make_executor()
    pid = _create(ex, "alice", "x")
    out = ex.submit_tx(tx("GOV_VOTE_CAST", "nobody", proposal_id=pid, support=True))
    assert out["result"]["weight"] == 0

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_VOTE_CAST", "nobody", proposal_id=pid, support=True))
    assert e.value.reason == "already_voted"


def test_vote_at_deadline_is_closed(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    pid = _create(ex, "alice", "x")

    clock.advance(VOTING_PERIOD_SECONDS)
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    assert e.value.reason == "voting_closed"
    assert _proposal(ex, pid)["yes_votes"] == 0


def test_vote_one_second_before_deadline_counts(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    pid = _create(ex, "alice", "x")

    clock.advance(VOTING_PERIOD_SECONDS - 1)
    ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    assert _proposal(ex, pid)["yes_votes"] == 10


def test_execute_before_deadline_is_rejected(make_executor, clock) -> None:
    ex = make_executor()
    pid = _create(ex, "alice", "x")
    clock.advance(VOTING_PERIOD_SECONDS - 1)

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_EXECUTE", "anyone", proposal_id=pid))
    assert e.value.reason == "voting_still_open"


def test_passed_proposal_sets_secondary_currency_once(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 600, "bob": 300})
    assert ex.ledger_view().get_param("default_secondary_currency") == "USDC"

    pid = _create(ex, "bob", "SET_DEFAULT_SECONDARY_COIN:ETH")
    ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    ex.submit_tx(tx("GOV_VOTE_CAST", "bob", proposal_id=pid, support=False))

    clock.advance(VOTING_PERIOD_SECONDS)
    out = ex.submit_tx(tx("GOV_EXECUTE", "carol", proposal_id=pid))

    assert out["result"]["passed"] is True
    assert ex.ledger_view().get_param("default_secondary_currency") == "ETH"
    pr = _proposal(ex, pid)
    assert pr["executed"] is True
    assert pr["passed"] is True
    assert out["events"][-1]["event"] == "proposal_executed"

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_EXECUTE", "carol", proposal_id=pid))
    assert e.value.code == "conflict"
    assert e.value.reason == "already_executed"


def test_tie_does_not_pass(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 300, "bob": 300})
    pid = _create(ex, "alice", "SET_DEFAULT_SECONDARY_COIN:ETH")
    ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    ex.submit_tx(tx("GOV_VOTE_CAST", "bob", proposal_id=pid, support=False))

    clock.advance(VOTING_PERIOD_SECONDS)
    out = ex.submit_tx(tx("GOV_EXECUTE", "alice", proposal_id=pid))

    assert out["result"]["passed"] is False
    assert ex.ledger_view().get_param("default_secondary_currency") == "USDC"
    assert _proposal(ex, pid)["executed"] is True


def test_no_votes_executes_as_failed(make_executor, clock) -> None:
    ex = make_executor()
    pid = _create(ex, "alice", "SET_DEFAULT_SECONDARY_COIN:ETH")
    clock.advance(VOTING_PERIOD_SECONDS + 10)
    out = ex.submit_tx(tx("GOV_EXECUTE", "alice", proposal_id=pid))
    assert out["result"]["passed"] is False


def test_empty_command_remainder_is_noop(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    pid = _create(ex, "alice", "SET_DEFAULT_SECONDARY_COIN:")
    assert _proposal(ex, pid)["action"] == {"kind": "noop"}

    ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    clock.advance(VOTING_PERIOD_SECONDS)
    out = ex.submit_tx(tx("GOV_EXECUTE", "alice", proposal_id=pid))

    assert out["result"]["passed"] is True
    assert ex.ledger_view().get_param("default_secondary_currency") == "USDC"


def test_unknown_proposal_is_not_found(make_executor) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=42, support=True))
    assert e.value.code == "not_found"
    assert e.value.reason == "proposal_not_found"

    with pytest.raises(ApplyError) as e:
        ex.submit_tx(tx("GOV_EXECUTE", "alice", proposal_id=42))
    assert e.value.reason == "proposal_not_found"


def test_failed_vote_leaves_no_vote_record(make_executor, clock) -> None:
    ex = make_executor(genesis_allocations={"alice": 10})
    pid = _create(ex, "alice", "x")
    clock.advance(VOTING_PERIOD_SECONDS)

    with pytest.raises(ApplyError):
        ex.submit_tx(tx("GOV_VOTE_CAST", "alice", proposal_id=pid, support=True))
    assert ex.read_state()["gov_votes"].get(str(pid), {}) == {}


def test_parse_proposal_action() -> None:
    assert parse_proposal_action("SET_DEFAULT_SECONDARY_COIN:ETH") == SetDefaultSecondaryCurrency("ETH")
    # Remainder is taken verbatim.
    assert parse_proposal_action("SET_DEFAULT_SECONDARY_COIN: eth ") == SetDefaultSecondaryCurrency(" eth ")
    assert parse_proposal_action("SET_DEFAULT_SECONDARY_COIN:") == NoOp()
    assert parse_proposal_action("please SET_DEFAULT_SECONDARY_COIN:ETH") == NoOp()
    assert parse_proposal_action("set_default_secondary_coin:ETH") == NoOp()
    assert parse_proposal_action("") == NoOp()


def test_action_json_shape() -> None:
    j = action_to_json(SetDefaultSecondaryCurrency("DAI"))
    assert j == {"kind": "set_default_secondary_currency", "value": "DAI"}
    assert action_from_json(j) == SetDefaultSecondaryCurrency("DAI")
    assert action_from_json({"kind": "something_else"}) == NoOp()


def test_proposal_status() -> None:
    pr = {"deadline": 100, "executed": False}
    assert proposal_status(pr, now=99) == STATUS_OPEN
    assert proposal_status(pr, now=100) == STATUS_CLOSED_PENDING
    assert proposal_status({"deadline": 100, "executed": True}, now=500) == STATUS_EXECUTED
