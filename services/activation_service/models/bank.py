import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column


class BankDetails(Base):
    """Payout account for a doer.

    Every submission inserts a row; the most recent row is the current one.
    """

    __tablename__ = "bank_details"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    doer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("doers.id"), index=True, nullable=False
    )

    account_holder_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(20), nullable=False)
    ifsc_code: Mapped[str] = mapped_column(String(11), nullable=False)  # e.g. SBIN0001234
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    upi_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Verified out of band; always false on submission
    is_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
