from datetime import date, datetime
import logging

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from outlate.core.config import settings
from outlate.core.errors import ValidationError
from outlate.models.outing import Outing as OutingModel, Person as PersonModel
from outlate.models.receipt import Receipt as ReceiptModel, ReceiptItem as ReceiptItemModel
from outlate.models.settlement import Settlement
from outlate.schemas.outing import Outing, OutingStatus
from outlate.schemas.receipt import AllocationBreakdown, OCRImportRequest, Receipt, SplitMethod
from outlate.schemas.settlement import Balance, OwingSummary, SettlementTransaction
from outlate.services.allocation_service import compute_allocation_breakdown
from outlate.services.balance_service import compute_balances, compute_owing_summaries
from outlate.services.receipt_service import receipt_from_ocr
from outlate.services.settlement_service import (
    archive_outing, mark_paid, outing_status, reconcile_settlements,
)
from outlate.services.validation_service import ensure_mutable, validate_outing, validate_receipt
from outlate.utils.ids import IdSource, uuid_id_source
from outlate.utils.money import format_cents

logger = logging.getLogger(__name__)

AVATAR_COLORS = [
    "#4F1787", "#FB773C", "#22C55E", "#3B82F6",
    "#EC4899", "#8B5CF6", "#F59E0B", "#06B6D4",
]


async def _load_outing(db: AsyncSession, outing_id: str) -> OutingModel | None:
    result = await db.execute(select(OutingModel).where(OutingModel.id == outing_id))
    return result.scalar_one_or_none()


async def get_outing_snapshot(db: AsyncSession, outing_id: str) -> Outing | None:
    """Immutable copy of an outing with its people, receipts and settlements."""
    row = await _load_outing(db, outing_id)
    if not row:
        return None
    return Outing.model_validate(row)


async def create_outing(
    db: AsyncSession,
    name: str,
    people: list[str],
    created_by: str | None = None,
    outing_date: date | None = None,
    ids: IdSource = uuid_id_source,
) -> Outing:
    row = OutingModel(
        id=ids(),
        name=name,
        outing_date=outing_date,
        created_by=created_by,
        status=OutingStatus.active,
    )
    row.people = [
        PersonModel(
            id=ids(),
            outing_id=row.id,
            name=person_name,
            color=AVATAR_COLORS[index % len(AVATAR_COLORS)],
            sort_order=index,
        )
        for index, person_name in enumerate(people)
    ]
    outing = Outing.model_validate(row)
    validate_outing(outing)

    db.add(row)
    await db.commit()
    logger.info(f"Created outing {outing.id} with {len(outing.people)} people")
    return outing


def _receipt_row(receipt: Receipt) -> ReceiptModel:
    row = ReceiptModel(
        id=receipt.id,
        outing_id=receipt.outing_id,
        vendor_name=receipt.vendor_name,
        image_url=receipt.image_url,
        subtotal=receipt.subtotal,
        tax=receipt.tax,
        tip=receipt.tip,
        total=receipt.total,
        paid_by=receipt.paid_by,
        split_method=receipt.split_method,
        included_people=list(receipt.included_people),
        processed_at=receipt.processed_at,
    )
    row.items = [
        ReceiptItemModel(
            id=item.id,
            receipt_id=receipt.id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
            assigned_to=list(item.assigned_to),
            sort_order=index,
        )
        for index, item in enumerate(receipt.items)
    ]
    return row


async def add_receipt(db: AsyncSession, outing_id: str, receipt: Receipt) -> Receipt | None:
    """
    Store a receipt on an outing. The receipt is validated against the outing's
    people first. Existing settlements are left alone; callers recompute them.
    """
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None
    ensure_mutable(outing)
    if receipt.outing_id != outing_id:
        raise ValidationError(f"Receipt {receipt.id} belongs to outing {receipt.outing_id}", field="outing_id")
    validate_receipt(receipt, outing.person_ids())
    validate_outing(outing.model_copy(update={"receipts": [*outing.receipts, receipt]}))

    db.add(_receipt_row(receipt))
    await db.commit()
    logger.info(f"Added receipt {receipt.id} ({format_cents(receipt.total, settings.currency_symbol)}) to outing {outing_id}")
    return receipt


async def import_ocr_receipt(
    db: AsyncSession,
    outing_id: str,
    body: OCRImportRequest,
    ids: IdSource = uuid_id_source,
) -> Receipt | None:
    """Build a receipt from a capture-service payload and store it."""
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None

    included = body.included_people
    if included is None and body.split_method == SplitMethod.equal:
        included = outing.person_ids()

    receipt = receipt_from_ocr(
        body.ocr,
        outing_id=outing_id,
        paid_by=body.paid_by,
        ids=ids,
        split_method=body.split_method,
        included_people=included,
        assignments=body.assignments,
        image_url=body.image_url,
    )
    return await add_receipt(db, outing_id, receipt)


async def get_outing_balances(db: AsyncSession, outing_id: str) -> list[Balance] | None:
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None
    return compute_balances(outing)


async def get_owing_summaries(db: AsyncSession, outing_id: str) -> list[OwingSummary] | None:
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None
    return compute_owing_summaries(outing)


async def get_receipt_allocations(
    db: AsyncSession, outing_id: str, receipt_id: str
) -> list[AllocationBreakdown] | None:
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None
    for receipt in outing.receipts:
        if receipt.id == receipt_id:
            return compute_allocation_breakdown(receipt, outing.person_ids())
    return None


async def recompute_settlements(
    db: AsyncSession,
    outing_id: str,
    ids: IdSource = uuid_id_source,
) -> list[SettlementTransaction] | None:
    """
    Full recompute from the current receipts. Paid settlements stay, unpaid
    settlements are deleted and replaced by a new plan over what is outstanding.
    """
    row = await _load_outing(db, outing_id)
    if not row:
        return None
    outing = Outing.model_validate(row)
    ensure_mutable(outing)

    balances = compute_balances(outing)
    plan = reconcile_settlements(balances, outing.settlements)

    await db.execute(
        delete(Settlement).where(Settlement.outing_id == outing_id, Settlement.paid == False)
    )

    kept = [t for t in plan if t.id is not None]
    new_rows = [
        Settlement(
            id=ids(),
            outing_id=outing_id,
            from_person=t.from_person,
            to_person=t.to_person,
            amount=t.amount,
            paid=False,
            sort_order=index,
        )
        for index, t in enumerate(plan)
        if t.id is None
    ]
    if new_rows:
        db.add_all(new_rows)

    result = kept + [SettlementTransaction.model_validate(r) for r in new_rows]
    row.status = outing_status(outing, result)
    await db.commit()
    logger.info(f"Outing {outing_id}: {len(kept)} paid settlements kept, {len(new_rows)} new")
    return result


async def mark_settlement_paid(
    db: AsyncSession, settlement_id: str, paid_at: datetime | None = None
) -> SettlementTransaction | None:
    """
    Record that a settlement was paid. Latches the outing's stored status to
    settled once every settlement is paid.
    """
    result = await db.execute(select(Settlement).where(Settlement.id == settlement_id))
    settlement = result.scalar_one_or_none()
    if not settlement:
        return None

    outing_row = await _load_outing(db, settlement.outing_id)
    outing = Outing.model_validate(outing_row)
    ensure_mutable(outing)

    updated = mark_paid(SettlementTransaction.model_validate(settlement), paid_at)
    settlement.paid = True
    settlement.paid_at = updated.paid_at

    transactions = [updated if t.id == updated.id else t for t in outing.settlements]
    outing_row.status = outing_status(outing, transactions)
    await db.commit()
    logger.info(f"Settlement {settlement_id} marked paid; outing {outing.id} is {outing_row.status.value}")
    return updated


async def get_outing_status(db: AsyncSession, outing_id: str) -> OutingStatus | None:
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        return None
    return outing_status(outing)


async def archive(db: AsyncSession, outing_id: str) -> Outing | None:
    row = await _load_outing(db, outing_id)
    if not row:
        return None
    archived = archive_outing(Outing.model_validate(row))
    row.status = OutingStatus.archived
    await db.commit()
    logger.info(f"Archived outing {outing_id}")
    return archived
