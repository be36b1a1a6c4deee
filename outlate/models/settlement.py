from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, BigInteger, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outlate.core.database import Base
from outlate.utils.ids import uuid_id_source


class Settlement(Base):
    __tablename__ = "settlements"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=uuid_id_source)
    outing_id: Mapped[str] = mapped_column(String(64), ForeignKey("outings.id"), index=True, nullable=False)
    from_person: Mapped[str] = mapped_column(String(64), ForeignKey("people.id"), index=True, nullable=False)
    to_person: Mapped[str] = mapped_column(String(64), ForeignKey("people.id"), index=True, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    paid: Mapped[bool] = mapped_column(Boolean, default=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    outing: Mapped["Outing"] = relationship(back_populates="settlements")
