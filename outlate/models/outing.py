from datetime import date, datetime, timezone

from sqlalchemy import String, Date, DateTime, Integer, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outlate.core.database import Base
from outlate.schemas.outing import OutingStatus
from outlate.utils.ids import uuid_id_source


class Outing(Base):
    __tablename__ = "outings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=uuid_id_source)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    outing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[OutingStatus] = mapped_column(
        SAEnum(OutingStatus), nullable=False, default=OutingStatus.active
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    people: Mapped[list["Person"]] = relationship(back_populates="outing", lazy="selectin", order_by="Person.sort_order", cascade="all, delete-orphan")
    receipts: Mapped[list["Receipt"]] = relationship(back_populates="outing", lazy="selectin", order_by="Receipt.created_at", cascade="all, delete-orphan")
    settlements: Mapped[list["Settlement"]] = relationship(back_populates="outing", lazy="selectin", order_by="Settlement.sort_order", cascade="all, delete-orphan")


class Person(Base):
    __tablename__ = "people"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=uuid_id_source)
    outing_id: Mapped[str] = mapped_column(String(64), ForeignKey("outings.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    outing: Mapped["Outing"] = relationship(back_populates="people")
