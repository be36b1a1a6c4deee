import logging
from collections import Counter
from datetime import datetime, timezone

from outlate.core.errors import ValidationError
from outlate.schemas.outing import Outing, OutingStatus
from outlate.schemas.settlement import Balance, SettlementTransaction
from outlate.services.validation_service import ensure_mutable, validate_settlements

logger = logging.getLogger(__name__)


def compute_settlements(balances: list[Balance]) -> list[SettlementTransaction]:
    """
    Reduce net balances to payer -> payee transactions (greedy two-pointer).

    Debtors and creditors are each sorted by amount descending, ties by person id.
    The largest remaining debtor pays the largest remaining creditor as much as
    either side allows; whichever side hits zero is dropped. Every step zeroes at
    least one person, so N people with nonzero balances need at most N - 1
    transactions. Not guaranteed to be the global minimum.
    """
    duplicates = sorted(pid for pid, n in Counter(b.person_id for b in balances).items() if n > 1)
    if duplicates:
        raise ValidationError(f"Duplicate balances for: {', '.join(duplicates)}", field="balances")
    total = sum(b.net for b in balances)
    if total != 0:
        raise ValidationError(f"Balances must sum to zero, got {total}", field="balances")

    debtors = []
    creditors = []
    for b in balances:
        if b.net > 0:
            debtors.append([b.person_id, b.net])
        elif b.net < 0:
            creditors.append([b.person_id, -b.net])

    debtors.sort(key=lambda x: (-x[1], x[0]))
    creditors.sort(key=lambda x: (-x[1], x[0]))

    result = []
    i, j = 0, 0
    while i < len(debtors) and j < len(creditors):
        debtor_id, debt_amount = debtors[i]
        creditor_id, credit_amount = creditors[j]
        transfer = min(debt_amount, credit_amount)
        result.append(SettlementTransaction(
            from_person=debtor_id,
            to_person=creditor_id,
            amount=transfer,
        ))
        debtors[i][1] -= transfer
        creditors[j][1] -= transfer
        if debtors[i][1] == 0:
            i += 1
        if creditors[j][1] == 0:
            j += 1

    validate_settlements(balances, result)
    logger.debug(f"Settled {len(balances)} balances with {len(result)} transactions")
    return result


def apply_paid_transactions(
    balances: list[Balance],
    transactions: list[SettlementTransaction],
) -> list[Balance]:
    """Balances still outstanding once the paid transactions are netted off."""
    net = {b.person_id: b.net for b in balances}
    for t in transactions:
        if not t.paid:
            continue
        net[t.from_person] = net.get(t.from_person, 0) - t.amount
        net[t.to_person] = net.get(t.to_person, 0) + t.amount
    return [Balance(person_id=pid, net=amount) for pid, amount in net.items()]


def reconcile_settlements(
    balances: list[Balance],
    existing: list[SettlementTransaction],
) -> list[SettlementTransaction]:
    """
    Recompute settlements after the balances changed.
    Paid transactions are payment facts and are kept; unpaid ones are
    invalidated and replaced by a fresh plan over what is still outstanding.
    """
    paid = [t for t in existing if t.paid]
    outstanding = apply_paid_transactions(balances, paid)
    fresh = compute_settlements(outstanding)
    dropped = len(existing) - len(paid)
    if dropped:
        logger.info(f"Replaced {dropped} unpaid settlements with {len(fresh)} new ones")
    return paid + fresh


def mark_paid(transaction: SettlementTransaction, paid_at: datetime | None = None) -> SettlementTransaction:
    if transaction.paid:
        raise ValidationError(
            f"Settlement {transaction.from_person} -> {transaction.to_person} is already paid",
            field="paid",
        )
    return transaction.model_copy(update={
        "paid": True,
        "paid_at": paid_at or datetime.now(timezone.utc),
    })


def outing_status(outing: Outing, transactions: list[SettlementTransaction] | None = None) -> OutingStatus:
    """
    Current status, derived from payment facts rather than trusted from storage.
    archived is terminal; otherwise the outing is settled once it has settlements
    and every one of them is paid.
    """
    if outing.status == OutingStatus.archived:
        return OutingStatus.archived
    if transactions is None:
        transactions = outing.settlements
    if transactions and all(t.paid for t in transactions):
        return OutingStatus.settled
    return OutingStatus.active


def archive_outing(outing: Outing) -> Outing:
    ensure_mutable(outing)
    status = outing_status(outing)
    if status != OutingStatus.settled:
        raise ValidationError(f"Outing {outing.id} is {status.value}; only settled outings can be archived", field="status")
    return outing.model_copy(update={"status": OutingStatus.archived})
