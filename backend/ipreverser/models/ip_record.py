"""
IP Reverser: IP Record SQLAlchemy Model
=========================================

What:  ORM model for the `ip_records` table.
Who:   Written and read by SqlRecordStore; created by initialize() and by
       Alembic revision 001.

Table Design:
    - id:           SERIAL primary key, assigned by the database
    - original_ip:  Dotted quad as extracted (VARCHAR(15) fits 255.255.255.255)
    - reversed_ip:  Octet-reversed form of original_ip
    - created_at:   Insert time (UTC); drives "most recent first" listing

    Rows are create-only: nothing updates or deletes them.

Indexes:
    idx_ip_records_created_at   ORDER BY created_at DESC LIMIT n
    idx_ip_records_original_ip  lookups by caller address
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from ipreverser.database import Base


class IPRecordRow(Base):
    """A persisted (original, reversed, timestamp) tuple."""

    __tablename__ = "ip_records"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    original_ip: Mapped[str] = mapped_column(
        String(15),
        nullable=False,
    )

    reversed_ip: Mapped[str] = mapped_column(
        String(15),
        nullable=False,
    )

    # Set client-side as well so rows inserted in the same second still
    # order correctly on backends with coarse CURRENT_TIMESTAMP.
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_ip_records_created_at", "created_at"),
        Index("idx_ip_records_original_ip", "original_ip"),
    )

    def __repr__(self) -> str:
        return (
            f"<IPRecordRow(id={self.id}, original_ip='{self.original_ip}', "
            f"reversed_ip='{self.reversed_ip}')>"
        )
