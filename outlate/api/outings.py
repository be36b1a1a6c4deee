from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from outlate.core.database import get_db
from outlate.schemas.outing import Outing, OutingCreate, OutingStatusResponse
from outlate.schemas.receipt import AllocationBreakdown, OCRImportRequest, Receipt
from outlate.schemas.settlement import (
    Balance, MarkPaidRequest, OwingSummary, SettlementTransaction,
)
from outlate.services.outing_service import (
    add_receipt, archive, create_outing, get_outing_balances, get_outing_snapshot,
    get_outing_status, get_owing_summaries, get_receipt_allocations, import_ocr_receipt,
    mark_settlement_paid, recompute_settlements,
)

router = APIRouter(tags=["outings"])


@router.post("/api/outings", response_model=Outing, status_code=201)
async def create(
    body: OutingCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_outing(
        db, body.name, body.people, created_by=body.created_by, outing_date=body.outing_date
    )


@router.get("/api/outings/{outing_id}", response_model=Outing)
async def get(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    outing = await get_outing_snapshot(db, outing_id)
    if not outing:
        raise HTTPException(status_code=404, detail="Outing not found")
    return outing


@router.post("/api/outings/{outing_id}/receipts", response_model=Receipt, status_code=201)
async def create_receipt(
    outing_id: str,
    body: Receipt,
    db: AsyncSession = Depends(get_db),
):
    receipt = await add_receipt(db, outing_id, body)
    if not receipt:
        raise HTTPException(status_code=404, detail="Outing not found")
    return receipt


@router.post("/api/outings/{outing_id}/receipts/ocr", response_model=Receipt, status_code=201)
async def create_receipt_from_ocr(
    outing_id: str,
    body: OCRImportRequest,
    db: AsyncSession = Depends(get_db),
):
    receipt = await import_ocr_receipt(db, outing_id, body)
    if not receipt:
        raise HTTPException(status_code=404, detail="Outing not found")
    return receipt


@router.get("/api/outings/{outing_id}/receipts/{receipt_id}/allocations", response_model=list[AllocationBreakdown])
async def receipt_allocations(
    outing_id: str,
    receipt_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await get_receipt_allocations(db, outing_id, receipt_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return result


@router.get("/api/outings/{outing_id}/balances", response_model=list[Balance])
async def balances(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await get_outing_balances(db, outing_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Outing not found")
    return result


@router.get("/api/outings/{outing_id}/summary", response_model=list[OwingSummary])
async def summary(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await get_owing_summaries(db, outing_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Outing not found")
    return result


@router.post("/api/outings/{outing_id}/settlements", response_model=list[SettlementTransaction])
async def settle(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Recompute the settlement plan from the current receipts."""
    result = await recompute_settlements(db, outing_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Outing not found")
    return result


@router.post("/api/settlements/{settlement_id}/paid", response_model=SettlementTransaction)
async def mark_paid(
    settlement_id: str,
    body: MarkPaidRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await mark_settlement_paid(db, settlement_id, body.paid_at)
    if result is None:
        raise HTTPException(status_code=404, detail="Settlement not found")
    return result


@router.get("/api/outings/{outing_id}/status", response_model=OutingStatusResponse)
async def status(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await get_outing_status(db, outing_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Outing not found")
    return OutingStatusResponse(outing_id=outing_id, status=result.value)


@router.post("/api/outings/{outing_id}/archive", response_model=Outing)
async def archive_outing(
    outing_id: str,
    db: AsyncSession = Depends(get_db),
):
    result = await archive(db, outing_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Outing not found")
    return result
