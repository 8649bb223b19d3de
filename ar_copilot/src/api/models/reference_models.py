from typing import List, Optional

from pydantic import ConfigDict

from .account_models import CamelModel


class DenialCodeMapping(CamelModel):
    code: str
    description: str
    questions: List[str]
    required_fields: List[str]
    next_steps: List[str]

    model_config = ConfigDict(frozen=True)


class OptionItem(CamelModel):
    value: str
    label: str

    model_config = ConfigDict(frozen=True)


class CommentRequest(CamelModel):
    # Form values as typed by the agent; nothing here is validated.
    patient_name: Optional[str] = None
    account_number: Optional[str] = None
    insurance_name: Optional[str] = None
    rep_name: Optional[str] = None
    call_reference: Optional[str] = None
    denial_code: Optional[str] = None
    date_of_service: Optional[str] = None
    eligibility_from_date: Optional[str] = None
    eligibility_status: Optional[str] = None
    additional_notes: Optional[str] = None


class CommentResponse(CamelModel):
    comment: str


class SessionResponse(CamelModel):
    session_id: str
