import logging
from collections import defaultdict

from outlate.core.errors import InternalConsistencyError
from outlate.schemas.outing import Outing
from outlate.schemas.settlement import Balance, OwingBreakdownEntry, OwingSummary, SettlementTransaction
from outlate.services.allocation_service import compute_allocations
from outlate.services.validation_service import validate_outing

logger = logging.getLogger(__name__)


def compute_balances(outing: Outing) -> list[Balance]:
    """
    Net balance per outing person, in outing order (zero balances included).
    net = shares owed across all receipts - totals of receipts the person paid.
    Positive net = owes others; negative net = is owed.
    """
    validate_outing(outing)

    person_ids = outing.person_ids()
    net = {pid: 0 for pid in person_ids}

    for receipt in outing.receipts:
        for share in compute_allocations(receipt, person_ids):
            net[share.person_id] += share.amount
        # The payer fronted the whole bill.
        net[receipt.paid_by] -= receipt.total

    imbalance = sum(net.values())
    if imbalance != 0:
        logger.error(f"Outing {outing.id}: balances sum to {imbalance} instead of 0")
        raise InternalConsistencyError(f"Outing {outing.id}: balances sum to {imbalance} instead of 0")

    return [Balance(person_id=pid, net=amount) for pid, amount in net.items()]


def compute_owing_summaries(
    outing: Outing,
    transactions: list[SettlementTransaction] | None = None,
) -> list[OwingSummary]:
    """
    What each person still has to pay and still has to receive, from the
    unpaid settlement transactions. Defaults to the outing's own settlements.
    """
    if transactions is None:
        transactions = outing.settlements
    names = {p.id: p.name for p in outing.people}

    owed = defaultdict(int)
    owed_to = defaultdict(int)
    breakdown: dict[str, list[OwingBreakdownEntry]] = defaultdict(list)
    for t in transactions:
        if t.paid:
            continue
        owed[t.from_person] += t.amount
        owed_to[t.to_person] += t.amount
        breakdown[t.from_person].append(OwingBreakdownEntry(
            to_person_id=t.to_person,
            to_person_name=names.get(t.to_person, "Unknown"),
            amount=t.amount,
        ))

    return [
        OwingSummary(
            person_id=person.id,
            person_name=person.name,
            total_owed=owed[person.id],
            total_owed_to=owed_to[person.id],
            net_amount=owed[person.id] - owed_to[person.id],
            breakdown=breakdown[person.id],
        )
        for person in outing.people
    ]
