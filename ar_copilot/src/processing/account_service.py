import time
from datetime import datetime
from typing import Any, List, Optional, Tuple
from zoneinfo import ZoneInfo

import structlog

from ..api.models.account_models import PatientAccount, PatientAccountCreate, PatientAccountUpdate
from ..core.config.settings import Settings
from ..core.monitoring.app_metrics import MetricsCollector
from ..core.storage.account_store import AccountStore
from .comment_generator import generate_rcm_comment, select_comment_template
from .denial_codes import get_denial_code_mapping
from .session_export import export_filename, export_session_csv

logger = structlog.get_logger(__name__)


class AccountNotFoundError(LookupError):
    def __init__(self, account_id: int):
        super().__init__(f"Patient account {account_id} not found")
        self.account_id = account_id


class AccountService:
    """Call workflows over the account store: CRUD, denial selection, comments, export."""

    def __init__(self, store: AccountStore, metrics_collector: MetricsCollector, settings: Settings):
        self.store = store
        self.metrics_collector = metrics_collector
        self.settings = settings

    def _now(self) -> datetime:
        if self.settings.COMMENT_TIMEZONE:
            return datetime.now(ZoneInfo(self.settings.COMMENT_TIMEZONE))
        return datetime.now()

    def _require(self, account_id: int, operation: str) -> PatientAccount:
        account = self.store.get(account_id)
        if account is None:
            logger.warning("Patient account not found", account_id=account_id, operation=operation)
            self.metrics_collector.record_account_operation(operation, "not_found")
            raise AccountNotFoundError(account_id)
        return account

    def new_session_id(self) -> str:
        return f"{self.settings.SESSION_ID_PREFIX}{int(time.time() * 1000)}"

    def list_session_accounts(self, session_id: str) -> List[PatientAccount]:
        accounts = self.store.list_by_session(session_id)
        self.metrics_collector.record_account_operation("list", "success")
        logger.debug("Session accounts listed", session_id=session_id, count=len(accounts))
        return accounts

    def get_account(self, account_id: int) -> PatientAccount:
        account = self._require(account_id, "get")
        self.metrics_collector.record_account_operation("get", "success")
        return account

    def create_account(self, data: PatientAccountCreate) -> PatientAccount:
        account = self.store.create(data)
        self.metrics_collector.record_account_operation("create", "success")
        self.metrics_collector.set_accounts_stored(self.store.count())
        logger.info("Patient account created", account_id=account.id, session_id=account.session_id)
        return account

    def update_account(self, account_id: int, update: PatientAccountUpdate) -> PatientAccount:
        self._require(account_id, "update")
        account = self.store.update(account_id, update.changes())
        self.metrics_collector.record_account_operation("update", "success")
        logger.info("Patient account updated", account_id=account_id, fields=sorted(update.model_fields_set))
        return account

    def delete_account(self, account_id: int) -> None:
        if not self.store.delete(account_id):
            logger.warning("Patient account not found", account_id=account_id, operation="delete")
            self.metrics_collector.record_account_operation("delete", "not_found")
            raise AccountNotFoundError(account_id)
        self.metrics_collector.record_account_operation("delete", "success")
        self.metrics_collector.set_accounts_stored(self.store.count())
        logger.info("Patient account deleted", account_id=account_id)

    def select_denial_code(self, account_id: int, denial_code: str) -> PatientAccount:
        """
        Stores the denial code and, for a code in the table, its description.
        For an unknown code a table description of the previous code is cleared;
        a description the agent typed is kept.
        """
        current = self._require(account_id, "select_denial_code")
        changes = {"denial_code": denial_code}
        mapping = get_denial_code_mapping(denial_code)
        if mapping is not None:
            changes["denial_description"] = mapping.description
        else:
            previous = get_denial_code_mapping(current.denial_code)
            if previous is not None and current.denial_description == previous.description:
                changes["denial_description"] = None
            logger.info("Denial code not in guidance table", denial_code=denial_code)
        account = self.store.update(account_id, changes)
        self.metrics_collector.record_account_operation("select_denial_code", "success")
        return account

    def copy_call_details(self, target_id: int, source_id: int) -> PatientAccount:
        """Copies rep name, call reference and insurance from another account of the call."""
        source = self._require(source_id, "copy_call_details")
        self._require(target_id, "copy_call_details")
        changes = {
            "rep_name": source.rep_name,
            "call_reference": source.call_reference,
            "insurance_name": source.insurance_name,
        }
        account = self.store.update(target_id, changes)
        self.metrics_collector.record_account_operation("copy_call_details", "success")
        logger.info("Call details copied between accounts", source_id=source_id, target_id=target_id)
        return account

    def open_new_account(self, session_id: str, from_account_id: Optional[int] = None) -> PatientAccount:
        """
        Creates a placeholder account for the next patient discussed on the call.
        The account number follows ACC-<year>-<nnn> where nnn counts the session's accounts.
        Rep name, call reference and insurance carry over from `from_account_id` when given.
        """
        existing = self.store.list_by_session(session_id)
        rep_name = call_reference = None
        insurance_name = self.settings.NEW_ACCOUNT_DEFAULT_INSURANCE
        if from_account_id is not None:
            current = self._require(from_account_id, "open_new_account")
            rep_name = current.rep_name
            call_reference = current.call_reference
            insurance_name = current.insurance_name

        data = PatientAccountCreate(
            patient_name=self.settings.NEW_ACCOUNT_PATIENT_NAME,
            account_number=f"ACC-{self._now().year}-{len(existing) + 1:03d}",
            insurance_name=insurance_name,
            rep_name=rep_name,
            call_reference=call_reference,
            session_id=session_id,
        )
        return self.create_account(data)

    def generate_comment_for(self, form_data: Any) -> str:
        comment = generate_rcm_comment(form_data, now=self._now())
        denial_code = form_data.get("denial_code") if isinstance(form_data, dict) else getattr(form_data, "denial_code", None)
        self.metrics_collector.record_comment_generated(select_comment_template(denial_code))
        return comment

    def generate_comment(self, account_id: int) -> str:
        account = self._require(account_id, "generate_comment")
        return self.generate_comment_for(account)

    def export_session(self, session_id: str) -> Tuple[str, str]:
        """Returns (filename, csv_text) for every account of the session."""
        accounts = self.store.list_by_session(session_id)
        now = self._now()
        content = export_session_csv(session_id, accounts, now=now)
        self.metrics_collector.record_session_export(len(accounts))
        return export_filename(now), content
