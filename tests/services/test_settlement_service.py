import random
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as SchemaError

from outlate.core.errors import ValidationError
from outlate.schemas.outing import OutingStatus
from outlate.schemas.settlement import Balance, SettlementTransaction
from outlate.services.balance_service import compute_balances
from outlate.services.settlement_service import (
    apply_paid_transactions, archive_outing, compute_settlements, mark_paid,
    outing_status, reconcile_settlements,
)

ALEX = "person-1"
JORDAN = "person-2"
SAM = "person-3"
MORGAN = "person-4"


def balances_of(**nets):
    return [Balance(person_id=pid, net=net) for pid, net in nets.items()]


def transfers(transactions):
    return [(t.from_person, t.to_person, t.amount) for t in transactions]


def assert_settles(balances, transactions):
    remaining = {b.person_id: b.net for b in balances}
    for t in transactions:
        remaining[t.from_person] -= t.amount
        remaining[t.to_person] += t.amount
    assert all(v == 0 for v in remaining.values())
    assert sum(t.amount for t in transactions) == sum(max(b.net, 0) for b in balances)


def test_single_creditor_collects_from_everyone():
    balances = balances_of(A=1835, B=-6007, C=1850, D=2322)
    result = compute_settlements(balances)
    assert transfers(result) == [("D", "B", 2322), ("C", "B", 1850), ("A", "B", 1835)]
    assert len(result) <= 3
    assert_settles(balances, result)
    assert all(not t.paid and t.paid_at is None for t in result)


def test_friday_night_settlements(outing):
    balances = compute_balances(outing)
    result = compute_settlements(balances)
    assert transfers(result) == [
        (SAM, JORDAN, 4257),
        (MORGAN, JORDAN, 774),
        (MORGAN, ALEX, 1548),
    ]
    assert_settles(balances, result)


def test_ties_broken_by_person_id():
    result = compute_settlements(balances_of(b=100, a=100, d=-100, c=-100))
    assert transfers(result) == [("a", "c", 100), ("b", "d", 100)]


def test_both_sides_reaching_zero_advance_together():
    result = compute_settlements(balances_of(a=500, b=-500, c=200, d=-200))
    assert transfers(result) == [("a", "b", 500), ("c", "d", 200)]


def test_zero_balances_need_no_transactions():
    assert compute_settlements(balances_of(a=0, b=0)) == []
    assert compute_settlements([]) == []


def test_unbalanced_input_rejected():
    with pytest.raises(ValidationError):
        compute_settlements(balances_of(A=1835, B=-3557, C=1850, D=2322))


def test_duplicate_person_rejected():
    with pytest.raises(ValidationError):
        compute_settlements([Balance(person_id="a", net=5), Balance(person_id="a", net=-5)])


def test_settlements_are_idempotent(outing):
    balances = compute_balances(outing)
    assert compute_settlements(balances) == compute_settlements(balances)


@pytest.mark.parametrize("seed", range(10))
def test_random_balances_bounded_and_zeroed(seed):
    rng = random.Random(seed)
    nets = [rng.randint(-20000, 20000) for _ in range(rng.randint(1, 15))]
    nets.append(-sum(nets))
    balances = [Balance(person_id=f"p{i:02d}", net=n) for i, n in enumerate(nets)]
    result = compute_settlements(balances)
    nonzero = sum(1 for n in nets if n != 0)
    assert len(result) <= max(nonzero - 1, 0)
    assert all(t.amount > 0 for t in result)
    assert_settles(balances, result)


def test_apply_paid_transactions_ignores_unpaid():
    balances = balances_of(a=300, b=-300)
    transactions = [
        SettlementTransaction(from_person="a", to_person="b", amount=100, paid=True),
        SettlementTransaction(from_person="a", to_person="b", amount=200),
    ]
    assert apply_paid_transactions(balances, transactions) == balances_of(a=200, b=-200)


def test_reconcile_keeps_paid_and_replans_the_rest(outing):
    balances = compute_balances(outing)
    paid = SettlementTransaction(
        id="s-1", from_person=SAM, to_person=JORDAN, amount=4257,
        paid=True, paid_at=datetime(2024, 1, 16, 10, 0, tzinfo=timezone.utc),
    )
    stale = SettlementTransaction(id="s-2", from_person=MORGAN, to_person=JORDAN, amount=999)
    result = reconcile_settlements(balances, [paid, stale])
    assert result[0] == paid
    assert transfers(result[1:]) == [(MORGAN, ALEX, 1548), (MORGAN, JORDAN, 774)]
    assert all(t.id is None for t in result[1:])
    assert_settles(balances, [t.model_copy(update={"paid": True}) for t in result])


@pytest.mark.parametrize("amount", [0, -100])
def test_transaction_amount_must_be_positive(amount):
    with pytest.raises(SchemaError):
        SettlementTransaction(from_person="a", to_person="b", amount=amount)


def test_mark_paid_returns_paid_copy():
    tx = SettlementTransaction(from_person="a", to_person="b", amount=100)
    when = datetime(2024, 1, 16, 10, 0, tzinfo=timezone.utc)
    paid = mark_paid(tx, when)
    assert paid.paid is True
    assert paid.paid_at == when
    assert tx.paid is False


def test_mark_paid_twice_rejected():
    tx = mark_paid(SettlementTransaction(from_person="a", to_person="b", amount=100))
    assert tx.paid_at is not None
    with pytest.raises(ValidationError):
        mark_paid(tx)


def test_status_is_derived_from_payments(outing):
    unpaid = SettlementTransaction(from_person=SAM, to_person=JORDAN, amount=4257)
    paid = unpaid.model_copy(update={"paid": True})

    assert outing_status(outing) == OutingStatus.active
    assert outing_status(outing, [paid, unpaid]) == OutingStatus.active
    assert outing_status(outing, [paid]) == OutingStatus.settled

    # A stale stored "settled" does not win over the payment facts.
    stale = outing.model_copy(update={"status": OutingStatus.settled, "settlements": [unpaid]})
    assert outing_status(stale) == OutingStatus.active

    archived = outing.model_copy(update={"status": OutingStatus.archived})
    assert outing_status(archived, [unpaid]) == OutingStatus.archived


def test_archive_only_from_settled(outing):
    paid = SettlementTransaction(from_person=SAM, to_person=JORDAN, amount=4257, paid=True)
    settled = outing.model_copy(update={"settlements": [paid]})

    archived = archive_outing(settled)
    assert archived.status == OutingStatus.archived
    assert settled.status == OutingStatus.active

    with pytest.raises(ValidationError):
        archive_outing(outing)
    with pytest.raises(ValidationError):
        archive_outing(archived)
