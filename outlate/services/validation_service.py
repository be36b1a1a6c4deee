"""
Input checks run before allocation and output checks run after settlement.

Input problems raise ValidationError (the caller corrects the data). Broken
output invariants raise InternalConsistencyError (a defect in the engine).
"""
import logging
from collections import Counter, defaultdict
from typing import Collection

from outlate.core.config import settings
from outlate.core.errors import InternalConsistencyError, ValidationError
from outlate.schemas.outing import Outing, OutingStatus
from outlate.schemas.receipt import Receipt, SplitMethod
from outlate.schemas.settlement import Balance, SettlementTransaction
from outlate.utils.money import format_cents

logger = logging.getLogger(__name__)

MAX_OUTING_NAME_LENGTH = 100


def _money(cents: int) -> str:
    return format_cents(cents, settings.currency_symbol)


def validate_receipt(
    receipt: Receipt,
    person_ids: Collection[str] | None = None,
    tolerance_cents: int | None = None,
) -> None:
    """
    Reject a receipt that cannot be allocated.
    Pass person_ids (the outing's people) to also check every person reference.
    """
    if tolerance_cents is None:
        tolerance_cents = settings.total_tolerance_cents

    for field in ("subtotal", "tax", "tip", "total"):
        value = getattr(receipt, field)
        if value < 0:
            raise ValidationError(f"Receipt {receipt.id}: {field} cannot be negative ({_money(value)})", field=field)

    for item in receipt.items:
        if item.price < 0:
            raise ValidationError(f"Item {item.id} ({item.name}): price cannot be negative", field="items")
        if item.quantity < 1:
            raise ValidationError(f"Item {item.id} ({item.name}): quantity must be at least 1", field="items")

    items_sum = sum(item.extended_price for item in receipt.items)
    if items_sum != receipt.subtotal:
        raise ValidationError(
            f"Receipt {receipt.id}: items add up to {_money(items_sum)} but subtotal is {_money(receipt.subtotal)}",
            field="subtotal",
        )

    expected_total = receipt.subtotal + receipt.tax + receipt.tip
    if abs(receipt.total - expected_total) > tolerance_cents:
        raise ValidationError(
            f"Receipt {receipt.id}: total {_money(receipt.total)} does not match "
            f"subtotal + tax + tip = {_money(expected_total)}",
            field="total",
        )

    if receipt.split_method == SplitMethod.equal:
        if not receipt.included_people:
            raise ValidationError(f"Receipt {receipt.id}: equal split needs at least one person", field="included_people")
    else:
        for item in receipt.items:
            if not item.assigned_to:
                raise ValidationError(
                    f"Item {item.id} ({item.name}) on receipt {receipt.id} is not assigned to anyone",
                    field="items",
                )
        if not receipt.items and receipt.total > 0:
            raise ValidationError(
                f"Receipt {receipt.id}: by-item split has no items to carry the total",
                field="items",
            )

    if person_ids is not None:
        known = set(person_ids)
        referenced = [receipt.paid_by, *receipt.included_people]
        for item in receipt.items:
            referenced.extend(item.assigned_to)
        unknown = sorted({pid for pid in referenced if pid not in known})
        if unknown:
            raise ValidationError(
                f"Receipt {receipt.id} references people not in the outing: {', '.join(unknown)}",
                field="people",
            )


def validate_outing(outing: Outing) -> None:
    """Outing-level checks. Receipts themselves are checked when allocated."""
    if not 1 <= len(outing.name.strip()) <= MAX_OUTING_NAME_LENGTH:
        raise ValidationError(f"Outing name must be 1 to {MAX_OUTING_NAME_LENGTH} characters", field="name")

    counts = Counter(outing.person_ids())
    duplicates = sorted(pid for pid, n in counts.items() if n > 1)
    if duplicates:
        raise ValidationError(f"Outing {outing.id} has duplicate people: {', '.join(duplicates)}", field="people")

    if len(outing.people) < settings.min_people_per_outing:
        raise ValidationError(
            f"Outing {outing.id} needs at least {settings.min_people_per_outing} people, has {len(outing.people)}",
            field="people",
        )
    if len(outing.people) > settings.max_people_per_outing:
        raise ValidationError(
            f"Outing {outing.id} has {len(outing.people)} people, limit is {settings.max_people_per_outing}",
            field="people",
        )
    if len(outing.receipts) > settings.max_receipts_per_outing:
        raise ValidationError(
            f"Outing {outing.id} has {len(outing.receipts)} receipts, limit is {settings.max_receipts_per_outing}",
            field="receipts",
        )

    for receipt in outing.receipts:
        if receipt.outing_id != outing.id:
            raise ValidationError(
                f"Receipt {receipt.id} belongs to outing {receipt.outing_id}, not {outing.id}",
                field="receipts",
            )


def ensure_mutable(outing: Outing) -> None:
    if outing.status == OutingStatus.archived:
        raise ValidationError(f"Outing {outing.id} is archived and can no longer change", field="status")


def validate_settlements(balances: list[Balance], transactions: list[SettlementTransaction]) -> None:
    """
    Post-conditions of the minimizer:
    the transferred total equals the total owed, and applying every transaction
    brings every balance to exactly zero.
    """
    owed = sum(max(b.net, 0) for b in balances)
    transferred = sum(t.amount for t in transactions)
    if transferred != owed:
        logger.error(f"Settlement total {_money(transferred)} does not match total owed {_money(owed)}")
        raise InternalConsistencyError(f"Settlement total {_money(transferred)} does not match total owed {_money(owed)}")

    remaining = defaultdict(int)
    for b in balances:
        remaining[b.person_id] += b.net
    for t in transactions:
        if t.amount <= 0:
            logger.error(f"Non-positive settlement {t.from_person} -> {t.to_person}: {t.amount}")
            raise InternalConsistencyError(f"Settlement amount must be positive, got {t.amount}")
        remaining[t.from_person] -= t.amount
        remaining[t.to_person] += t.amount

    leftover = {pid: amount for pid, amount in remaining.items() if amount != 0}
    if leftover:
        logger.error(f"Settlements leave balances unresolved: {leftover}")
        raise InternalConsistencyError(f"Settlements leave balances unresolved: {leftover}")
