import pytest
from datetime import datetime

from ar_copilot.src.processing.comment_generator import (
    generate_rcm_comment,
    select_comment_template,
    format_comment_timestamp,
    GENERIC_TEMPLATE,
)
from ar_copilot.src.processing.denial_codes import DENIAL_CODE_MAPPINGS
from ar_copilot.src.api.models.reference_models import CommentRequest

NOW = datetime(2024, 3, 5, 14, 7, 0)


@pytest.fixture
def form_data() -> dict:
    return {
        "patient_name": "Jane Roe",
        "account_number": "ACC-1001",
        "insurance_name": "uhc",
        "rep_name": "Maria",
        "call_reference": "REF-778",
        "denial_code": "CO-27",
        "date_of_service": "01/15/2024",
        "eligibility_from_date": "12/31/2023",
        "eligibility_status": "terminated",
    }


def test_base_sentence_uses_form_values_and_insurance_label(form_data: dict):
    comment = generate_rcm_comment(form_data, now=NOW)
    assert comment.startswith(
        "Spoke with Maria from United Healthcare (UHC) regarding account ACC-1001 (Jane Roe) "
        "- denial code CO-27 for DOS 01/15/2024."
    )
    assert comment.endswith("Call reference #REF-778. 3/5/2024 14:07.")


def test_co27_template_embeds_eligibility(form_data: dict):
    comment = generate_rcm_comment(form_data, now=NOW)
    assert (
        "Patient eligibility confirmed terminated as of 12/31/2023. Coverage terminated prior to DOS 01/15/2024. "
        "Advised patient responsible for charges"
    ) in comment


def test_co27_template_placeholders_when_eligibility_missing(form_data: dict):
    form_data.pop("eligibility_status")
    form_data.pop("eligibility_from_date")
    comment = generate_rcm_comment(form_data, now=NOW)
    assert "Patient eligibility confirmed status pending as of [Date]." in comment


def test_empty_input_yields_all_placeholders():
    comment = generate_rcm_comment({}, now=NOW)
    assert comment == (
        "Spoke with [Rep Name] from [Insurance] regarding account [Account] ([Patient]) - denial code [Code] for DOS [DOS]. "
        "Denial reason documented per payer representative guidance. Follow-up action required "
        "Call reference #[Reference]. 3/5/2024 14:07."
    )


def test_none_input_is_accepted():
    assert "[Rep Name]" in generate_rcm_comment(None, now=NOW)


def test_empty_strings_are_treated_as_missing(form_data: dict):
    form_data["rep_name"] = ""
    form_data["call_reference"] = ""
    comment = generate_rcm_comment(form_data, now=NOW)
    assert comment.startswith("Spoke with [Rep Name] from")
    assert "Call reference #[Reference]." in comment


def test_unknown_insurance_value_passes_through(form_data: dict):
    form_data["insurance_name"] = "Tricare West"
    assert "from Tricare West regarding" in generate_rcm_comment(form_data, now=NOW)


def test_unknown_code_uses_generic_template_with_notes_verbatim(form_data: dict):
    form_data["denial_code"] = "OA-23"
    form_data["additional_notes"] = "Rep says resubmit with modifier 59, ETA 30 days."
    comment = generate_rcm_comment(form_data, now=NOW)
    assert "denial code OA-23 for DOS" in comment
    assert (
        "Denial reason documented per payer representative guidance. "
        "Additional notes: Rep says resubmit with modifier 59, ETA 30 days."
    ) in comment


@pytest.mark.parametrize("code,prefix", [
    ("CO-97", "Notes: "),
    ("CO-50", "Documentation reviewed: "),
    ("CO-16", "Specific issue: "),
    ("CO-22", "COB details: "),
    ("CO-96", "Remark codes: "),
    ("CO-109", "Correct payer info: "),
    ("CO-151", "Frequency details: "),
])
def test_notes_are_embedded_verbatim(form_data: dict, code: str, prefix: str):
    form_data["denial_code"] = code
    form_data["additional_notes"] = "see fax dated 02/01, ref \"X-9\""
    comment = generate_rcm_comment(form_data, now=NOW)
    assert f"{prefix}see fax dated 02/01, ref \"X-9\"" in comment


@pytest.mark.parametrize("code,fallback", [
    ("CO-97", "No additional reimbursement available"),
    ("CO-50", "Additional clinical documentation may be required for appeal"),
    ("CO-16", "Correction and resubmission required per payer specifications"),
    ("CO-22", "Primary payer verification required before resubmission"),
    ("CO-96", "Plan exclusion applies"),
    ("CO-109", "Insurance verification required"),
    ("CO-151", "Medical necessity documentation required for additional units"),
])
def test_fallback_text_without_notes(form_data: dict, code: str, fallback: str):
    form_data["denial_code"] = code
    assert fallback in generate_rcm_comment(form_data, now=NOW)


@pytest.mark.parametrize("code,active_text,inactive_text", [
    ("PR-204", "Patient eligibility active but specific service excluded per plan benefits",
     "Coverage verification required for service authorization"),
    ("PR-1", "Annual deductible not yet met", "Coverage status pending verification"),
    ("PR-2", "Standard coinsurance rate applies", "Benefit verification required"),
])
def test_eligibility_dependent_templates(form_data: dict, code: str, active_text: str, inactive_text: str):
    form_data["denial_code"] = code
    form_data["eligibility_status"] = "active"
    assert active_text in generate_rcm_comment(form_data, now=NOW)

    form_data["eligibility_status"] = "pending"
    comment = generate_rcm_comment(form_data, now=NOW)
    assert inactive_text in comment
    assert active_text not in comment


def test_co29_embeds_date_of_service(form_data: dict):
    form_data["denial_code"] = "CO-29"
    assert "Timely filing deadline exceeded for DOS 01/15/2024." in generate_rcm_comment(form_data, now=NOW)


@pytest.mark.parametrize("code,text", [
    ("CO-18", "Duplicate claim submission identified. Original claim processing confirmed. No additional payment due"),
    ("CO-45", "Charge exceeds contracted fee schedule allowance. Payment adjusted to contracted rate per provider agreement"),
    ("PR-3", "Patient copayment responsibility confirmed per plan requirements. Standard copay amount applies to service"),
])
def test_fixed_templates(form_data: dict, code: str, text: str):
    form_data["denial_code"] = code
    assert text in generate_rcm_comment(form_data, now=NOW)


def test_accepts_camel_case_keys():
    comment = generate_rcm_comment({"repName": "Lee", "accountNumber": "A-1", "denialCode": "CO-18"}, now=NOW)
    assert comment.startswith("Spoke with Lee from [Insurance] regarding account A-1 ([Patient]) - denial code CO-18")


def test_accepts_model_instances():
    request = CommentRequest(rep_name="Lee", denial_code="CO-45", call_reference="R1")
    comment = generate_rcm_comment(request, now=NOW)
    assert "Spoke with Lee" in comment
    assert "Charge exceeds contracted fee schedule allowance" in comment
    assert "Call reference #R1." in comment


def test_is_pure_for_fixed_timestamp(form_data: dict):
    assert generate_rcm_comment(form_data, now=NOW) == generate_rcm_comment(dict(form_data), now=NOW)


def test_every_table_code_has_specific_template():
    for code in DENIAL_CODE_MAPPINGS:
        assert select_comment_template(code) == code
    assert select_comment_template("XX-1") == GENERIC_TEMPLATE
    assert select_comment_template(None) == GENERIC_TEMPLATE


def test_timestamp_format_is_unpadded_date_and_24h_time():
    assert format_comment_timestamp(datetime(2024, 11, 9, 8, 5)) == "11/9/2024 08:05"
    assert format_comment_timestamp(datetime(2024, 1, 1, 23, 59)) == "1/1/2024 23:59"
