from datetime import datetime, timezone

from sqlalchemy import (
    String, DateTime, Integer, BigInteger, ForeignKey, JSON, Enum as SAEnum
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outlate.core.database import Base
from outlate.schemas.receipt import SplitMethod
from outlate.utils.ids import uuid_id_source


class Receipt(Base):
    __tablename__ = "receipts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=uuid_id_source)
    outing_id: Mapped[str] = mapped_column(String(64), ForeignKey("outings.id"), index=True, nullable=False)
    vendor_name: Mapped[str | None] = mapped_column(String, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    # Money columns hold integer cents.
    subtotal: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tax: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tip: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total: Mapped[int] = mapped_column(BigInteger, nullable=False)
    paid_by: Mapped[str] = mapped_column(String(64), ForeignKey("people.id"), index=True, nullable=False)
    split_method: Mapped[SplitMethod] = mapped_column(SAEnum(SplitMethod), nullable=False)
    included_people: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    outing: Mapped["Outing"] = relationship(back_populates="receipts")
    items: Mapped[list["ReceiptItem"]] = relationship(back_populates="receipt", lazy="selectin", order_by="ReceiptItem.sort_order", cascade="all, delete-orphan")


class ReceiptItem(Base):
    __tablename__ = "receipt_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=uuid_id_source)
    receipt_id: Mapped[str] = mapped_column(String(64), ForeignKey("receipts.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    assigned_to: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    receipt: Mapped["Receipt"] = relationship(back_populates="items")
