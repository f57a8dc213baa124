"""
Audit service — records changes to the books.

The audit row is staged in the caller's session, so it commits
or rolls back together with the change it describes. Nothing in
the ledger reads the audit trail back.
"""

from sqlalchemy.orm import Session

from general_ledger.logging_config import get_logger
from general_ledger.models.audit_log import AuditLog

logger = get_logger("services.audit")


class AuditService:

    def __init__(self, db: Session):
        self.db = db

    def record(self, event_type: str, details: str) -> AuditLog:
        """Stage an audit record for the current unit of work."""
        entry = AuditLog(event_type=event_type, details=details)
        self.db.add(entry)
        logger.debug("Audit event staged", extra={"event_type": event_type})
        return entry
