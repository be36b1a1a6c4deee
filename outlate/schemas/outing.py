import enum
from datetime import date
from pydantic import BaseModel, ConfigDict

from outlate.schemas.receipt import Receipt
from outlate.schemas.settlement import SettlementTransaction


class OutingStatus(str, enum.Enum):
    active = "active"
    settled = "settled"
    archived = "archived"


class Person(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str
    name: str
    color: str | None = None


class Outing(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)
    id: str
    name: str
    outing_date: date | None = None
    created_by: str | None = None
    people: list[Person] = []
    receipts: list[Receipt] = []
    settlements: list[SettlementTransaction] = []
    status: OutingStatus = OutingStatus.active

    def person_ids(self) -> list[str]:
        return [p.id for p in self.people]


class OutingCreate(BaseModel):
    name: str
    people: list[str]
    created_by: str | None = None
    outing_date: date | None = None


class OutingStatusResponse(BaseModel):
    outing_id: str
    status: str
