from fastapi import APIRouter

from outlate.schemas.outing import Outing
from outlate.schemas.receipt import AllocationBreakdown, OCRImportRequest, PersonShare, Receipt
from outlate.schemas.settlement import Balance, SettlementTransaction, SettlementsRequest
from outlate.services.allocation_service import compute_allocation_breakdown, compute_allocations
from outlate.services.balance_service import compute_balances
from outlate.services.receipt_service import receipt_from_ocr
from outlate.services.settlement_service import compute_settlements

router = APIRouter(prefix="/api/compute", tags=["compute"])

# Stateless endpoints: every request carries its full input, amounts in cents.


@router.post("/allocations", response_model=list[PersonShare])
async def allocations(body: Receipt):
    return compute_allocations(body)


@router.post("/allocations/breakdown", response_model=list[AllocationBreakdown])
async def allocation_breakdown(body: Receipt):
    return compute_allocation_breakdown(body)


@router.post("/balances", response_model=list[Balance])
async def balances(body: Outing):
    return compute_balances(body)


@router.post("/settlements", response_model=list[SettlementTransaction])
async def settlements(body: SettlementsRequest):
    return compute_settlements(body.balances)


@router.post("/outings/{outing_id}/receipts/from-ocr", response_model=Receipt)
async def convert_ocr(outing_id: str, body: OCRImportRequest):
    """Convert a capture-service payload to a Receipt without storing it."""
    return receipt_from_ocr(
        body.ocr,
        outing_id=outing_id,
        paid_by=body.paid_by,
        split_method=body.split_method,
        included_people=body.included_people,
        assignments=body.assignments,
        image_url=body.image_url,
    )
