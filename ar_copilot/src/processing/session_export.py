import csv
import io
from datetime import datetime
from typing import Iterable, Optional

import structlog

from ..api.models.account_models import PatientAccount
from .comment_generator import generate_rcm_comment
from .denial_codes import get_insurance_label

logger = structlog.get_logger(__name__)

EXPORT_HEADERS = [
    "Patient Name",
    "Account Number",
    "Insurance Name",
    "Rep Name",
    "Call Reference",
    "Denial Code",
    "Denial Description",
    "Date of Service",
    "Eligibility From Date",
    "Eligibility Status",
    "Additional Notes",
    "Generated Comment",
    "Created At",
    "Updated At",
]


def _format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return f"{value.month}/{value.day}/{value.year}, {value:%H:%M:%S}"


def export_filename(now: datetime) -> str:
    return f"ar-session-{now:%Y-%m-%d}.csv"


def _account_row(account: PatientAccount, now: datetime) -> list:
    return [
        account.patient_name or "",
        account.account_number or "",
        get_insurance_label(account.insurance_name) or "",
        account.rep_name or "",
        account.call_reference or "",
        account.denial_code or "",
        account.denial_description or "",
        account.date_of_service or "",
        account.eligibility_from_date or "",
        account.eligibility_status or "",
        account.additional_notes or "",
        generate_rcm_comment(account, now=now),
        _format_timestamp(account.created_at),
        _format_timestamp(account.updated_at),
    ]


def export_session_csv(session_id: str, accounts: Iterable[PatientAccount], now: Optional[datetime] = None) -> str:
    """
    Renders every account of a call session as CSV, preceded by '#' comment lines
    describing the session. Each row carries the comment generated for that account.
    """
    now = now or datetime.now()
    accounts = list(accounts)

    buffer = io.StringIO()
    buffer.write("# AR Copilot Session Export\n")
    buffer.write(f"# Session ID: {session_id}\n")
    buffer.write(f"# Export Date: {_format_timestamp(now)}\n")
    buffer.write(f"# Total Accounts: {len(accounts)}\n")
    buffer.write("\n")

    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for account in accounts:
        writer.writerow(_account_row(account, now))

    logger.info("Session exported to CSV", session_id=session_id, account_count=len(accounts))
    return buffer.getvalue()
