"""
Audit log model.

Records create/update/delete of accounts and journal entries
so every change to the books can be traced.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from general_ledger.models.base import Base


class AuditLog(Base):
    """
    Immutable record of a change to the books.

    Audit records are append-only: never updated, never deleted.
    """

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
