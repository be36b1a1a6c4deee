import logging
import math
from datetime import datetime, timezone

from outlate.core.errors import ValidationError
from outlate.schemas.receipt import OCRResponse, Receipt, ReceiptItem, SplitMethod
from outlate.utils.ids import IdSource, uuid_id_source
from outlate.utils.money import to_cents

logger = logging.getLogger(__name__)


def _finite(value: float, field: str) -> float:
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite amount, got {value}", field=field)
    return value


def _quantity(value: float, name: str) -> int:
    _finite(value, "items")
    quantity = int(value)
    if quantity != value or quantity < 1:
        raise ValidationError(f"Item {name}: quantity must be a whole number of at least 1, got {value}", field="items")
    return quantity


def receipt_from_ocr(
    ocr: OCRResponse,
    outing_id: str,
    paid_by: str,
    ids: IdSource = uuid_id_source,
    split_method: SplitMethod = SplitMethod.equal,
    included_people: list[str] | None = None,
    assignments: list[list[str]] | None = None,
    image_url: str | None = None,
    processed_at: datetime | None = None,
) -> Receipt:
    """
    Turn the capture service's float payload into a Receipt in integer cents.
    assignments, when given, is one assignee list per OCR item (same order).
    Amounts are quantized here and nowhere else.
    """
    if assignments is not None and len(assignments) != len(ocr.items):
        raise ValidationError(
            f"Got {len(assignments)} assignment lists for {len(ocr.items)} items",
            field="assignments",
        )

    receipt_id = ids()
    items = []
    for index, ocr_item in enumerate(ocr.items):
        items.append(ReceiptItem(
            id=ids(),
            name=ocr_item.name,
            price=to_cents(_finite(ocr_item.price, "items")),
            quantity=_quantity(ocr_item.quantity, ocr_item.name),
            assigned_to=list(assignments[index]) if assignments is not None else [],
        ))

    receipt = Receipt(
        id=receipt_id,
        outing_id=outing_id,
        vendor_name=ocr.vendor_name,
        image_url=image_url,
        items=items,
        subtotal=to_cents(_finite(ocr.subtotal, "subtotal")),
        tax=to_cents(_finite(ocr.tax, "tax")),
        tip=to_cents(_finite(ocr.tip, "tip")),
        total=to_cents(_finite(ocr.total, "total")),
        paid_by=paid_by,
        split_method=split_method,
        included_people=list(included_people or []),
        processed_at=processed_at or datetime.now(timezone.utc),
    )
    logger.info(f"Imported receipt {receipt.id} from {ocr.vendor_name or 'unknown vendor'} with {len(items)} items")
    return receipt
