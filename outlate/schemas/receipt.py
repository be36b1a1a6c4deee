import enum
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class SplitMethod(str, enum.Enum):
    equal = "equal"
    by_item = "by-item"


class ReceiptItem(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str
    name: str
    price: int  # cents, per unit
    quantity: int = 1
    assigned_to: list[str] = []

    @property
    def extended_price(self) -> int:
        return self.price * self.quantity


class Receipt(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str
    outing_id: str
    vendor_name: str | None = None
    image_url: str | None = None
    items: list[ReceiptItem] = []
    subtotal: int
    tax: int = 0
    tip: int = 0
    total: int
    paid_by: str
    split_method: SplitMethod
    included_people: list[str] = []
    processed_at: datetime | None = None


class PersonShare(BaseModel):
    model_config = ConfigDict(frozen=True)
    receipt_id: str
    person_id: str
    amount: int


class AllocationBreakdown(BaseModel):
    """One person's part of a receipt. adjustment absorbs any gap between
    the printed total and subtotal + tax + tip, plus equal-split rounding."""
    model_config = ConfigDict(frozen=True)
    person_id: str
    subtotal: int
    tax: int
    tip: int
    adjustment: int = 0
    total: int


class OCRItem(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)
    name: str
    price: float
    quantity: float = 1


class OCRResponse(BaseModel):
    """Payload shape produced by the receipt-capture service. Major units, floats."""
    model_config = ConfigDict(allow_inf_nan=False)
    vendor_name: str | None = None
    items: list[OCRItem] = []
    subtotal: float
    tax: float = 0
    tip: float = 0
    total: float


class OCRImportRequest(BaseModel):
    ocr: OCRResponse
    paid_by: str
    split_method: SplitMethod = SplitMethod.equal
    included_people: list[str] | None = None
    assignments: list[list[str]] | None = None
    image_url: str | None = None
