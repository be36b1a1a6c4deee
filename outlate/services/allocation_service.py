import logging
from typing import Collection

from outlate.core.errors import InternalConsistencyError, ValidationError
from outlate.schemas.receipt import AllocationBreakdown, PersonShare, Receipt, SplitMethod
from outlate.services.validation_service import validate_receipt
from outlate.utils.money import distribute, split_evenly

logger = logging.getLogger(__name__)


def _spread(amount: int, weights: dict[str, int]) -> dict[str, int]:
    """distribute() that also accepts zero and negative amounts."""
    if amount == 0:
        return {pid: 0 for pid in weights}
    sign = -1 if amount < 0 else 1
    return {pid: sign * cents for pid, cents in distribute(abs(amount), weights).items()}


def _equal_breakdown(receipt: Receipt) -> list[AllocationBreakdown]:
    people = list(dict.fromkeys(receipt.included_people))
    even = {pid: 1 for pid in people}
    shares = _spread(receipt.total, even)
    subtotals = _spread(receipt.subtotal, even)
    taxes = _spread(receipt.tax, even)
    tips = _spread(receipt.tip, even)
    return [
        AllocationBreakdown(
            person_id=pid,
            subtotal=subtotals[pid],
            tax=taxes[pid],
            tip=tips[pid],
            adjustment=shares[pid] - subtotals[pid] - taxes[pid] - tips[pid],
            total=shares[pid],
        )
        for pid in people
    ]


def _by_item_breakdown(receipt: Receipt) -> list[AllocationBreakdown]:
    # Item prices are split per item; tax and tip are split once, across
    # everyone, by each person's share of the subtotal.
    subtotals: dict[str, int] = {}
    for item in receipt.items:
        for pid, cents in split_evenly(item.extended_price, item.assigned_to).items():
            subtotals[pid] = subtotals.get(pid, 0) + cents

    gap = receipt.total - receipt.subtotal - receipt.tax - receipt.tip
    if not subtotals:
        if receipt.tax or receipt.tip or gap:
            raise ValidationError(f"Receipt {receipt.id}: nobody is assigned to carry tax and tip", field="items")
        return []

    if receipt.subtotal > 0:
        weights = subtotals
    else:
        # Free items only: nothing to be proportional to, so split evenly.
        weights = {pid: 1 for pid in subtotals}

    taxes = _spread(receipt.tax, weights)
    tips = _spread(receipt.tip, weights)
    adjustments = _spread(gap, weights)
    return [
        AllocationBreakdown(
            person_id=pid,
            subtotal=subtotal,
            tax=taxes[pid],
            tip=tips[pid],
            adjustment=adjustments[pid],
            total=subtotal + taxes[pid] + tips[pid] + adjustments[pid],
        )
        for pid, subtotal in subtotals.items()
    ]


def compute_allocation_breakdown(
    receipt: Receipt,
    person_ids: Collection[str] | None = None,
) -> list[AllocationBreakdown]:
    """
    Per-person split of one receipt, itemised into subtotal, tax and tip parts.
    People appear in the order they first show up on the receipt.
    Raises ValidationError for receipts that cannot be split.
    """
    validate_receipt(receipt, person_ids)

    if receipt.split_method == SplitMethod.equal:
        breakdown = _equal_breakdown(receipt)
    else:
        breakdown = _by_item_breakdown(receipt)

    allocated = sum(b.total for b in breakdown)
    if allocated != receipt.total:
        logger.error(f"Receipt {receipt.id}: allocated {allocated} of total {receipt.total}")
        raise InternalConsistencyError(f"Receipt {receipt.id}: allocated {allocated} of total {receipt.total}")

    logger.debug(f"Allocated receipt {receipt.id} ({receipt.split_method.value}) across {len(breakdown)} people")
    return breakdown


def compute_allocations(
    receipt: Receipt,
    person_ids: Collection[str] | None = None,
) -> list[PersonShare]:
    """Shares of one receipt. They always sum exactly to receipt.total."""
    return [
        PersonShare(receipt_id=receipt.id, person_id=b.person_id, amount=b.total)
        for b in compute_allocation_breakdown(receipt, person_ids)
    ]
