import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class License(Base):
    """
    A user's entitlement to a named service for a period of time.

    Licenses are created by redeeming activation codes in the admin service;
    this service only reads them to answer validation requests.
    """

    __tablename__ = "licenses"
    __table_args__ = (
        UniqueConstraint("user_uuid", "service_name", name="uq_licenses_user_service"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_uuid: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    service_name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    # "immediate" starts on activation, "fixed" starts at a set date
    activation_type: Mapped[str] = mapped_column(String(20), nullable=False, default="immediate")
    service_start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    service_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    service_end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )
