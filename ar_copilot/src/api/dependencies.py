from typing import Optional

from fastapi import Depends
import structlog

from ar_copilot.src.core.config.settings import get_settings
from ar_copilot.src.core.monitoring.app_metrics import MetricsCollector
from ar_copilot.src.core.monitoring.audit_logger import AuditLogger
from ar_copilot.src.core.storage.account_store import AccountStore, InMemoryAccountStore
from ar_copilot.src.processing.account_service import AccountService

logger = structlog.get_logger(__name__) # Logger for dependency related messages

_account_store_instance: Optional[AccountStore] = None
_audit_logger_instance: Optional[AuditLogger] = None
_metrics_collector_instance: Optional[MetricsCollector] = None

def get_account_store() -> AccountStore:
    global _account_store_instance
    if _account_store_instance is None:
        _account_store_instance = InMemoryAccountStore()
        logger.info("Default InMemoryAccountStore instance created.")
    return _account_store_instance

def get_audit_logger() -> AuditLogger:
    global _audit_logger_instance
    if _audit_logger_instance is None:
        _audit_logger_instance = AuditLogger(max_entries=get_settings().AUDIT_LOG_MAX_ENTRIES)
        logger.info("Default AuditLogger instance created.")
    return _audit_logger_instance

def get_metrics_collector() -> MetricsCollector:
    global _metrics_collector_instance
    if _metrics_collector_instance is None:
        _metrics_collector_instance = MetricsCollector()
        logger.info("Default MetricsCollector instance created.")
    return _metrics_collector_instance

def get_account_service(
    store: AccountStore = Depends(get_account_store),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> AccountService:
    return AccountService(store=store, metrics_collector=metrics, settings=get_settings())
