import hashlib
import pytest
from unittest.mock import patch

from ar_copilot.src.core.monitoring.audit_logger import AuditLogger, AuditLogEntry


@pytest.mark.asyncio
async def test_log_access_records_entry_with_hashed_account_number():
    audit_logger = AuditLogger(max_entries=10)

    await audit_logger.log_access(
        user_id="agent-1",
        action="VIEW_ACCOUNT",
        resource="PatientAccount",
        resource_id="3",
        account_number="ACC-1001",
        ip_address="127.0.0.1",
        user_agent="TestAgent/1.0",
        session_id="session-1",
        details={"key": "value"},
    )

    assert len(audit_logger.entries) == 1
    entry = audit_logger.entries[0]
    assert isinstance(entry, AuditLogEntry)
    assert entry.action == "VIEW_ACCOUNT"
    assert entry.success is True
    assert entry.resource_id == "3"
    assert entry.account_number_hash == hashlib.sha256("ACC-1001".encode("utf-8")).hexdigest()
    assert entry.details == {"key": "value"}
    assert entry.failure_reason is None
    assert entry.timestamp.tzinfo is not None


@pytest.mark.asyncio
async def test_log_access_without_account_number():
    audit_logger = AuditLogger()
    await audit_logger.log_access(user_id=None, action="HEALTH_CHECK", success=False, failure_reason="nope")
    entry = audit_logger.entries[0]
    assert entry.account_number_hash is None
    assert entry.success is False
    assert entry.failure_reason == "nope"


@pytest.mark.asyncio
async def test_buffer_drops_oldest_entries():
    audit_logger = AuditLogger(max_entries=2)
    for action in ("A", "B", "C"):
        await audit_logger.log_access(user_id=None, action=action)
    assert [e.action for e in audit_logger.entries] == ["B", "C"]


@pytest.mark.asyncio
async def test_failures_are_logged_not_raised():
    audit_logger = AuditLogger()
    with patch("ar_copilot.src.core.monitoring.audit_logger.AuditLogEntry", side_effect=RuntimeError("boom")), \
         patch("ar_copilot.src.core.monitoring.audit_logger.logger") as mock_logger:
        await audit_logger.log_access(user_id=None, action="X")
    assert audit_logger.entries == []
    mock_logger.error.assert_called_once()


def test_hash_identifier_empty():
    assert AuditLogger()._hash_identifier("") == ""
