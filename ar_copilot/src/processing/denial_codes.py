"""
Static guidance for the denial reason codes an agent works during a call.

Each mapping carries the questions to ask the payer representative, the
record fields that should be filled before the comment is generated, and the
follow-up steps for the account.
"""
from typing import Dict, List, Optional

from ..api.models.reference_models import DenialCodeMapping, OptionItem


def _mapping(code: str, description: str, questions: List[str], required_fields: List[str], next_steps: List[str]) -> DenialCodeMapping:
    return DenialCodeMapping(
        code=code,
        description=description,
        questions=questions,
        required_fields=required_fields,
        next_steps=next_steps,
    )


DENIAL_CODE_MAPPINGS: Dict[str, DenialCodeMapping] = {
    m.code: m for m in (
        _mapping(
            "CO-27",
            "Expenses incurred after coverage terminated",
            [
                "What was the patient's eligibility status on the date of service?",
                "Was the plan active on the date of service?",
                "What is the effective and termination date of coverage?",
                "Is there any possibility of retroactive coverage?",
            ],
            ["eligibilityStatus", "eligibilityFromDate", "dateOfService", "repName"],
            [
                "Document termination date in patient record",
                "Generate final comment for RCM system",
                "Mark account for patient notification",
            ],
        ),
        _mapping(
            "CO-97",
            "The benefit for this service is included in the payment/allowance for another service/procedure",
            [
                "Which primary service was this bundled with?",
                "Was the bundled service paid correctly?",
                "Is there documentation showing separate services?",
                "What is the bundling policy for this procedure?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Review bundling documentation",
                "Verify primary service payment status",
                "Document bundling rationale",
            ],
        ),
        _mapping(
            "PR-204",
            "This service/equipment/drug is not covered under the patient's current benefit plan",
            [
                "Is prior authorization required for this service?",
                "What is the patient's current benefit plan?",
                "Are there any covered alternatives?",
                "Is this service excluded from the plan?",
            ],
            ["eligibilityStatus", "dateOfService", "repName", "additionalNotes"],
            [
                "Review benefit plan documentation",
                "Check for prior authorization requirements",
                "Notify patient of coverage limitations",
            ],
        ),
        _mapping(
            "CO-50",
            "These are non-covered services because this is not deemed a 'medical necessity'",
            [
                "What criteria was used to determine medical necessity?",
                "Is there additional documentation that supports necessity?",
                "Was a peer-to-peer review conducted?",
                "Are there appeal options available?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Gather additional medical documentation",
                "Consider peer-to-peer review",
                "Prepare appeal if warranted",
            ],
        ),
        _mapping(
            "CO-16",
            "Claim/service lacks information or has submission/billing error(s)",
            [
                "What specific information is missing?",
                "What type of billing error was identified?",
                "Can the claim be corrected and resubmitted?",
                "What documentation is needed for resubmission?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Identify missing information",
                "Correct billing errors",
                "Prepare for claim resubmission",
            ],
        ),
        _mapping(
            "CO-18",
            "Duplicate claim/service",
            [
                "What is the original claim number or date of submission?",
                "Was the previous claim paid or processed?",
                "Is this a true duplicate or a resubmission?",
                "Should we void one of the claims?",
            ],
            ["dateOfService", "repName", "callReference"],
            [
                "Verify original claim status",
                "Determine appropriate action",
                "Process duplicate resolution",
            ],
        ),
        _mapping(
            "CO-22",
            "This care may be covered by another payer per coordination of benefits",
            [
                "What other insurance does the patient have?",
                "Which payer should be primary?",
                "Has the primary insurance been billed first?",
                "What is the coordination of benefits order?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Verify insurance coordination",
                "Bill primary payer first",
                "Update billing sequence",
            ],
        ),
        _mapping(
            "CO-29",
            "The time limit for filing has expired",
            [
                "What is the filing deadline for this payer?",
                "When was the service originally provided?",
                "Are there any exceptions or appeals available?",
                "Was there a delay in receiving necessary documentation?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Document filing timeline",
                "Check for appeal options",
                "Review timely filing policies",
            ],
        ),
        _mapping(
            "CO-45",
            "Charge exceeds fee schedule/maximum allowable or contracted/legislated fee arrangement",
            [
                "What is the contracted rate for this service?",
                "Is this the correct procedure code?",
                "Are there any modifiers that should be applied?",
                "Is the provider in-network or out-of-network?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Review fee schedule",
                "Verify procedure coding",
                "Check contract terms",
            ],
        ),
        _mapping(
            "CO-96",
            "Non-covered charge(s). At least one Remark Code must be provided",
            [
                "What specific remark codes were provided?",
                "Why is this service considered non-covered?",
                "Are there any covered alternatives?",
                "Is this a plan exclusion or limitation?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Review remark codes",
                "Check plan benefits",
                "Explore alternatives",
            ],
        ),
        _mapping(
            "CO-109",
            "Claim not covered by this payer/contractor. You must send the claim to the correct payer/contractor",
            [
                "Which payer should receive this claim?",
                "What insurance information do we have on file?",
                "Has the patient's coverage changed?",
                "Do we need updated insurance cards?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Verify correct payer",
                "Update insurance information",
                "Resubmit to appropriate payer",
            ],
        ),
        _mapping(
            "CO-151",
            "Payment adjusted because the payer deems the information submitted does not support this many/frequency of services",
            [
                "What frequency limits apply to this service?",
                "How many units were billed versus allowed?",
                "Is there documentation supporting medical necessity?",
                "Are there any diagnosis codes that would support additional units?",
            ],
            ["dateOfService", "repName", "additionalNotes"],
            [
                "Review frequency guidelines",
                "Gather supporting documentation",
                "Consider appeal if warranted",
            ],
        ),
        _mapping(
            "PR-1",
            "Deductible amount",
            [
                "What is the patient's annual deductible?",
                "How much has been met this year?",
                "Is this in-network or out-of-network deductible?",
                "Should we bill the patient for this amount?",
            ],
            ["dateOfService", "repName", "eligibilityStatus"],
            [
                "Verify deductible information",
                "Calculate patient responsibility",
                "Generate patient statement",
            ],
        ),
        _mapping(
            "PR-2",
            "Coinsurance amount",
            [
                "What is the patient's coinsurance percentage?",
                "Is this based on allowed amount or billed charges?",
                "Are there any out-of-pocket maximums to consider?",
                "Should we collect this from the patient?",
            ],
            ["dateOfService", "repName", "eligibilityStatus"],
            [
                "Calculate coinsurance accurately",
                "Verify out-of-pocket limits",
                "Bill patient appropriately",
            ],
        ),
        _mapping(
            "PR-3",
            "Copayment amount",
            [
                "What is the standard copay for this type of service?",
                "Was the copay collected at time of service?",
                "Are there any copay exemptions for this patient?",
                "Should we pursue collection of outstanding copay?",
            ],
            ["dateOfService", "repName", "eligibilityStatus"],
            [
                "Verify copay requirements",
                "Check payment history",
                "Follow up on collections",
            ],
        ),
    )
}

INSURANCE_OPTIONS: List[OptionItem] = [
    OptionItem(value="aetna", label="Aetna"),
    OptionItem(value="uhc", label="United Healthcare (UHC)"),
    OptionItem(value="cigna", label="Cigna"),
    OptionItem(value="bcbs", label="Blue Cross Blue Shield"),
    OptionItem(value="humana", label="Humana"),
    OptionItem(value="anthem", label="Anthem"),
    OptionItem(value="kaiser", label="Kaiser Permanente"),
    OptionItem(value="molina", label="Molina Healthcare"),
    OptionItem(value="centene", label="Centene"),
    OptionItem(value="other", label="Other"),
]

ELIGIBILITY_STATUS_OPTIONS: List[OptionItem] = [
    OptionItem(value="active", label="Active"),
    OptionItem(value="inactive", label="Inactive"),
    OptionItem(value="terminated", label="Terminated"),
    OptionItem(value="pending", label="Pending"),
    OptionItem(value="unknown", label="Unknown"),
]

_INSURANCE_LABELS: Dict[str, str] = {option.value: option.label for option in INSURANCE_OPTIONS}


def get_denial_code_mapping(code: Optional[str]) -> Optional[DenialCodeMapping]:
    """Returns the guidance for a denial code, or None when the code is not in the table."""
    if not code:
        return None
    return DENIAL_CODE_MAPPINGS.get(code)


def list_denial_codes() -> List[DenialCodeMapping]:
    return list(DENIAL_CODE_MAPPINGS.values())


def get_insurance_label(value: Optional[str]) -> Optional[str]:
    """Maps an insurance option value to its display label; other values pass through unchanged."""
    if value is None:
        return None
    return _INSURANCE_LABELS.get(value, value)
