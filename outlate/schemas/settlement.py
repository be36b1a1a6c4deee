from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class Balance(BaseModel):
    """net > 0: the person owes money. net < 0: the person is owed money."""
    model_config = ConfigDict(frozen=True)
    person_id: str
    net: int


class SettlementTransaction(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str | None = None
    outing_id: str | None = None
    from_person: str
    to_person: str
    amount: int = Field(gt=0)
    paid: bool = False
    paid_at: datetime | None = None


class OwingBreakdownEntry(BaseModel):
    to_person_id: str
    to_person_name: str
    amount: int


class OwingSummary(BaseModel):
    person_id: str
    person_name: str
    total_owed: int
    total_owed_to: int
    net_amount: int
    breakdown: list[OwingBreakdownEntry] = []


class SettlementsRequest(BaseModel):
    balances: list[Balance]


class MarkPaidRequest(BaseModel):
    paid_at: datetime | None = None
