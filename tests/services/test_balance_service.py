from unittest.mock import patch

import pytest

from outlate.core.config import settings
from outlate.core.errors import InternalConsistencyError, ValidationError
from outlate.schemas.outing import Outing, Person
from outlate.schemas.receipt import PersonShare, Receipt, ReceiptItem, SplitMethod
from outlate.schemas.settlement import SettlementTransaction
from outlate.services.balance_service import compute_balances, compute_owing_summaries

ALEX = "person-1"
JORDAN = "person-2"
SAM = "person-3"
MORGAN = "person-4"


def nets(balances):
    return {b.person_id: b.net for b in balances}


def test_friday_night_balances(outing):
    balances = compute_balances(outing)
    assert [b.person_id for b in balances] == [ALEX, JORDAN, SAM, MORGAN]
    # Alex paid 70.95 and owes 32.25 + 23.22; Jordan paid 92.88 and owes 19.35 + 23.22.
    assert nets(balances) == {ALEX: -1548, JORDAN: -5031, SAM: 4257, MORGAN: 2322}
    assert sum(b.net for b in balances) == 0


def test_payer_is_credited_full_total():
    receipt = Receipt(
        id="r-1", outing_id="o-1",
        items=[ReceiptItem(id="i-1", name="Set lunch", price=1001)],
        subtotal=1001, total=1001, paid_by="a",
        split_method=SplitMethod.equal, included_people=["a", "b"],
    )
    outing = Outing(
        id="o-1", name="Lunch",
        people=[Person(id="a", name="A"), Person(id="b", name="B"), Person(id="c", name="C")],
        receipts=[receipt],
    )
    assert nets(compute_balances(outing)) == {"a": -500, "b": 500, "c": 0}


def test_outing_without_receipts_has_zero_balances(people):
    outing = Outing(id="o-1", name="Quiet night", people=people)
    assert all(b.net == 0 for b in compute_balances(outing))


def test_receipt_from_other_outing_rejected(outing, bar_receipt):
    stray = bar_receipt.model_copy(update={"id": "receipt-9", "outing_id": "outing-2"})
    bad = outing.model_copy(update={"receipts": [*outing.receipts, stray]})
    with pytest.raises(ValidationError):
        compute_balances(bad)


def test_duplicate_people_rejected(outing, people):
    bad = outing.model_copy(update={"people": [*people, people[0]]})
    with pytest.raises(ValidationError):
        compute_balances(bad)


def test_blank_outing_name_rejected(outing):
    with pytest.raises(ValidationError):
        compute_balances(outing.model_copy(update={"name": "  "}))


def test_outing_needs_two_people(outing, people):
    with pytest.raises(ValidationError) as exc:
        compute_balances(outing.model_copy(update={"people": people[:1], "receipts": []}))
    assert exc.value.field == "people"


def test_minimum_party_size_is_configurable(outing, people, monkeypatch):
    monkeypatch.setattr(settings, "min_people_per_outing", 1)
    solo = outing.model_copy(update={"people": people[:1], "receipts": []})
    assert nets(compute_balances(solo)) == {ALEX: 0}


def test_payer_outside_outing_rejected(outing, bar_receipt):
    stray = bar_receipt.model_copy(update={"paid_by": "person-99"})
    with pytest.raises(ValidationError):
        compute_balances(outing.model_copy(update={"receipts": [stray]}))


def test_allocation_defect_surfaces_as_internal_error(outing):
    """Shares that do not add up to the receipt total must never be coerced."""
    short = [PersonShare(receipt_id="receipt-1", person_id=ALEX, amount=1)]
    with patch("outlate.services.balance_service.compute_allocations", return_value=short):
        with pytest.raises(InternalConsistencyError):
            compute_balances(outing)


def test_balances_are_idempotent(outing):
    assert compute_balances(outing) == compute_balances(outing)


def test_owing_summaries_skip_paid_transactions(outing):
    transactions = [
        SettlementTransaction(from_person=SAM, to_person=JORDAN, amount=4257),
        SettlementTransaction(from_person=MORGAN, to_person=JORDAN, amount=774, paid=True),
        SettlementTransaction(from_person=MORGAN, to_person=ALEX, amount=1548),
    ]
    summaries = {s.person_id: s for s in compute_owing_summaries(outing, transactions)}

    morgan = summaries[MORGAN]
    assert morgan.total_owed == 1548
    assert morgan.total_owed_to == 0
    assert morgan.net_amount == 1548
    assert [(e.to_person_id, e.to_person_name, e.amount) for e in morgan.breakdown] == [
        (ALEX, "Alex Johnson", 1548)
    ]

    jordan = summaries[JORDAN]
    assert jordan.total_owed_to == 4257
    assert jordan.net_amount == -4257
    assert jordan.breakdown == []


def test_owing_summaries_default_to_outing_settlements(outing):
    settled = outing.model_copy(update={"settlements": [
        SettlementTransaction(from_person=SAM, to_person=ALEX, amount=100),
    ]})
    summaries = {s.person_id: s for s in compute_owing_summaries(settled)}
    assert summaries[SAM].total_owed == 100
    assert summaries[ALEX].total_owed_to == 100
