import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator, model_validator
from pydantic.alias_generators import to_camel

# MM/DD/YYYY as entered by the agent
SERVICE_DATE_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(0[1-9]|[12][0-9]|3[01])/\d{4}$")

REQUIRED_ACCOUNT_FIELDS = ("patient_name", "account_number", "insurance_name", "session_id")


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PatientAccountFields(CamelModel):
    """Optional call details shared by create, update and stored records."""
    rep_name: Optional[str] = Field(None, description="Name of the payer representative on the call.")
    call_reference: Optional[str] = Field(None, description="Call reference number given by the representative.")
    denial_code: Optional[str] = Field(None, description="Denial reason code, e.g. CO-27.")
    denial_description: Optional[str] = None
    date_of_service: Optional[str] = Field(None, description="Date of service, MM/DD/YYYY.")
    eligibility_from_date: Optional[str] = Field(None, description="Eligibility effective date, MM/DD/YYYY.")
    eligibility_status: Optional[str] = None
    additional_notes: Optional[str] = None

    @field_validator("date_of_service", "eligibility_from_date")
    @classmethod
    def check_date_format(cls, value: Optional[str]) -> Optional[str]:
        if value and not SERVICE_DATE_PATTERN.match(value):
            raise ValueError("Date must be in MM/DD/YYYY format")
        return value


class PatientAccountCreate(PatientAccountFields):
    patient_name: constr(strip_whitespace=True, min_length=1) = Field(..., description="Patient name.")
    account_number: constr(strip_whitespace=True, min_length=1) = Field(..., description="Patient account number.")
    insurance_name: constr(strip_whitespace=True, min_length=1) = Field(..., description="Insurance option value or payer name.")
    session_id: constr(strip_whitespace=True, min_length=1) = Field(..., description="Call session grouping key.")


class PatientAccountUpdate(PatientAccountFields):
    """Partial update: only the fields present in the payload are applied."""
    patient_name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    account_number: Optional[constr(strip_whitespace=True, min_length=1)] = None
    insurance_name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    session_id: Optional[constr(strip_whitespace=True, min_length=1)] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in REQUIRED_ACCOUNT_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class PatientAccount(PatientAccountCreate):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NewAccountRequest(CamelModel):
    from_account_id: Optional[int] = Field(
        None, description="Account whose rep name, call reference and insurance are carried over."
    )


class DenialCodeSelection(CamelModel):
    denial_code: constr(strip_whitespace=True, min_length=1)
