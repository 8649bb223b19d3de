import hashlib
import structlog
from collections import deque
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)
audit_log = structlog.get_logger("ar_copilot.audit")


class AuditLogEntry(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: Optional[str] = None
    action: str
    resource: Optional[str] = None
    resource_id: Optional[str] = None
    account_number_hash: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    session_id: Optional[str] = None
    success: bool = True
    failure_reason: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class AuditLogger:
    def __init__(self, max_entries: int = 1000):
        """
        Initializes the AuditLogger.
        Args:
            max_entries: Size of the in-memory buffer; the oldest entries are dropped first.
        """
        self._entries: deque = deque(maxlen=max_entries)
        logger.info("AuditLogger initialized.", max_entries=max_entries)

    def _hash_identifier(self, identifier: str) -> str:
        """Hashes an identifier using SHA-256."""
        if not identifier:
            return ""
        return hashlib.sha256(identifier.encode('utf-8')).hexdigest()

    @property
    def entries(self) -> List[AuditLogEntry]:
        return list(self._entries)

    async def log_access(
        self,
        user_id: Optional[str],
        action: str,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        account_number: Optional[str] = None, # Raw account number, stored hashed
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        session_id: Optional[str] = None,
        success: bool = True,
        failure_reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Records an access event in the audit trail and emits it as a structured log line.
        Audit failures are logged and never propagated to the caller.
        """
        try:
            entry = AuditLogEntry(
                user_id=user_id,
                action=action,
                resource=resource,
                resource_id=resource_id,
                account_number_hash=self._hash_identifier(account_number) if account_number else None,
                ip_address=ip_address,
                user_agent=user_agent,
                session_id=session_id,
                success=success,
                failure_reason=failure_reason,
                details=details
            )
            self._entries.append(entry)
            audit_log.info("audit_event", **entry.model_dump(exclude_none=True, exclude={"timestamp"}))
        except Exception as e:
            logger.error("Failed to store audit log entry.",
                         action=action, resource=resource, user_id=user_id,
                         error=str(e), exc_info=True)
