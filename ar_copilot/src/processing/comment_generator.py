from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic.alias_generators import to_camel

from .denial_codes import get_insurance_label

GENERIC_TEMPLATE = "generic"

PLACEHOLDERS = {
    "rep_name": "[Rep Name]",
    "insurance_name": "[Insurance]",
    "denial_code": "[Code]",
    "call_reference": "[Reference]",
    "date_of_service": "[DOS]",
    "patient_name": "[Patient]",
    "account_number": "[Account]",
}


class _FormValues:
    """Read-only view over a dict (snake_case or camelCase keys) or an object with attributes."""

    def __init__(self, form_data: Any):
        self._data = form_data

    def get(self, name: str) -> Optional[str]:
        if self._data is None:
            return None
        if isinstance(self._data, Mapping):
            value = self._data.get(name)
            if value is None:
                value = self._data.get(to_camel(name))
        else:
            value = getattr(self._data, name, None)
        return value or None

    def get_or(self, name: str, default: str) -> str:
        return self.get(name) or default


def _with_notes(values: _FormValues, prefix: str, fallback: str) -> str:
    notes = values.get("additional_notes")
    return f"{prefix}{notes}" if notes else fallback


def _is_active(values: _FormValues) -> bool:
    return values.get("eligibility_status") == "active"


_SPECIFIC_TEMPLATES: Dict[str, Callable[[_FormValues, str], str]] = {
    "CO-27": lambda v, dos: (
        f"Patient eligibility confirmed {v.get_or('eligibility_status', 'status pending')} as of "
        f"{v.get_or('eligibility_from_date', '[Date]')}. Coverage terminated prior to DOS {dos}. "
        "Advised patient responsible for charges"
    ),
    "CO-97": lambda v, dos: (
        "Service bundled with primary procedure per payer policy. Payment included in comprehensive service allowance. "
        + _with_notes(v, "Notes: ", "No additional reimbursement available")
    ),
    "PR-204": lambda v, dos: (
        "Service not covered under current benefit plan limitations. "
        + ("Patient eligibility active but specific service excluded per plan benefits" if _is_active(v)
           else "Coverage verification required for service authorization")
    ),
    "CO-50": lambda v, dos: (
        "Service denied due to medical necessity criteria not met per payer guidelines. "
        + _with_notes(v, "Documentation reviewed: ", "Additional clinical documentation may be required for appeal")
    ),
    "CO-16": lambda v, dos: (
        "Claim denied for missing/incorrect information. "
        + _with_notes(v, "Specific issue: ", "Correction and resubmission required per payer specifications")
    ),
    "CO-18": lambda v, dos: (
        "Duplicate claim submission identified. Original claim processing confirmed. No additional payment due"
    ),
    "CO-22": lambda v, dos: (
        "Coordination of benefits issue - other payer responsible. "
        + _with_notes(v, "COB details: ", "Primary payer verification required before resubmission")
    ),
    "CO-29": lambda v, dos: (
        f"Timely filing deadline exceeded for DOS {dos}. Claim submission deadline missed per payer policy"
    ),
    "CO-45": lambda v, dos: (
        "Charge exceeds contracted fee schedule allowance. Payment adjusted to contracted rate per provider agreement"
    ),
    "CO-96": lambda v, dos: (
        "Service determined non-covered per plan benefits. "
        + _with_notes(v, "Remark codes: ", "Plan exclusion applies")
    ),
    "CO-109": lambda v, dos: (
        "Incorrect payer - claim must be submitted to appropriate insurance carrier. "
        + _with_notes(v, "Correct payer info: ", "Insurance verification required")
    ),
    "CO-151": lambda v, dos: (
        "Service frequency/quantity exceeds payer guidelines. "
        + _with_notes(v, "Frequency details: ", "Medical necessity documentation required for additional units")
    ),
    "PR-1": lambda v, dos: (
        "Patient deductible responsibility confirmed. "
        + ("Annual deductible not yet met" if _is_active(v) else "Coverage status pending verification")
    ),
    "PR-2": lambda v, dos: (
        "Patient coinsurance responsibility per plan benefits. "
        + ("Standard coinsurance rate applies" if _is_active(v) else "Benefit verification required")
    ),
    "PR-3": lambda v, dos: (
        "Patient copayment responsibility confirmed per plan requirements. Standard copay amount applies to service"
    ),
}


def _generic_template(values: _FormValues, dos: str) -> str:
    return "Denial reason documented per payer representative guidance. " + _with_notes(
        values, "Additional notes: ", "Follow-up action required"
    )


def select_comment_template(denial_code: Optional[str]) -> str:
    """Name of the template a denial code selects: the code itself, or 'generic'."""
    return denial_code if denial_code in _SPECIFIC_TEMPLATES else GENERIC_TEMPLATE


def format_comment_timestamp(now: datetime) -> str:
    # en-US short date without zero padding, 24h clock
    return f"{now.month}/{now.day}/{now.year} {now:%H:%M}"


def generate_rcm_comment(form_data: Any, now: Optional[datetime] = None) -> str:
    """
    Builds the RCM comment for one account from the values entered during the call.

    Missing or empty values are replaced by bracketed placeholders, so any input
    (including an empty dict) yields a complete sentence. The denial-specific part
    is chosen by denial code and falls back to a generic sentence for unknown codes.
    """
    values = _FormValues(form_data)
    stamp = format_comment_timestamp(now or datetime.now())

    rep_name = values.get_or("rep_name", PLACEHOLDERS["rep_name"])
    insurance_name = get_insurance_label(values.get("insurance_name")) or PLACEHOLDERS["insurance_name"]
    denial_code = values.get_or("denial_code", PLACEHOLDERS["denial_code"])
    call_reference = values.get_or("call_reference", PLACEHOLDERS["call_reference"])
    dos = values.get_or("date_of_service", PLACEHOLDERS["date_of_service"])
    patient_name = values.get_or("patient_name", PLACEHOLDERS["patient_name"])
    account_number = values.get_or("account_number", PLACEHOLDERS["account_number"])

    template = _SPECIFIC_TEMPLATES.get(values.get("denial_code") or "", _generic_template)
    specific_comment = template(values, dos)

    base_comment = (
        f"Spoke with {rep_name} from {insurance_name} regarding account {account_number} "
        f"({patient_name}) - denial code {denial_code} for DOS {dos}."
    )
    return f"{base_comment} {specific_comment} Call reference #{call_reference}. {stamp}."
