from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog

from ...api.models.account_models import PatientAccount, PatientAccountCreate

logger = structlog.get_logger(__name__)


class AccountStore(ABC):
    """Storage interface for patient account records."""

    @abstractmethod
    def list_by_session(self, session_id: str) -> List[PatientAccount]:
        ...

    @abstractmethod
    def get(self, account_id: int) -> Optional[PatientAccount]:
        ...

    @abstractmethod
    def create(self, data: PatientAccountCreate) -> PatientAccount:
        ...

    @abstractmethod
    def update(self, account_id: int, changes: dict) -> Optional[PatientAccount]:
        ...

    @abstractmethod
    def delete(self, account_id: int) -> bool:
        ...

    @abstractmethod
    def count(self) -> int:
        ...


class InMemoryAccountStore(AccountStore):
    """
    Process-local store. Records are kept in insertion order keyed by a
    sequential id starting at 1; ids are never reused after a delete.
    """

    def __init__(self):
        self._accounts: Dict[int, PatientAccount] = {}
        self._next_id = 1
        logger.info("InMemoryAccountStore initialized.")

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def list_by_session(self, session_id: str) -> List[PatientAccount]:
        return [account for account in self._accounts.values() if account.session_id == session_id]

    def get(self, account_id: int) -> Optional[PatientAccount]:
        return self._accounts.get(account_id)

    def create(self, data: PatientAccountCreate) -> PatientAccount:
        account_id = self._next_id
        self._next_id += 1
        now = self._now()
        account = PatientAccount(id=account_id, created_at=now, updated_at=now, **data.model_dump())
        self._accounts[account_id] = account
        logger.debug("Account record created", account_id=account_id, session_id=account.session_id)
        return account

    def update(self, account_id: int, changes: dict) -> Optional[PatientAccount]:
        existing = self._accounts.get(account_id)
        if existing is None:
            return None
        protected = {"id", "created_at", "updated_at"}
        applied = {key: value for key, value in changes.items() if key not in protected}
        updated = existing.model_copy(update={**applied, "updated_at": self._now()})
        self._accounts[account_id] = updated
        logger.debug("Account record updated", account_id=account_id, fields=sorted(applied))
        return updated

    def delete(self, account_id: int) -> bool:
        removed = self._accounts.pop(account_id, None)
        return removed is not None

    def count(self) -> int:
        return len(self._accounts)
