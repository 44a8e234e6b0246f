from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

ApplicationStatus = Literal["pending", "approved", "rejected", "draft"]


class FormState(BaseModel):
    """Everything the wizard collects, kept as raw input until validation.

    Accepts camelCase (frontend) or snake_case keys; numbers are coerced to strings.
    """

    # Personal
    first_name: str = ""
    surname: str = ""
    date_of_birth: str = ""
    gender: str = ""
    marital_status: str = ""
    district: str = ""
    village: str = ""
    home_province: str = ""

    # Employment
    employment_status: str = ""
    employer_name: str = ""
    occupation: str = ""
    monthly_income: str = ""
    employment_length: str = ""
    work_address: str = ""
    work_phone: str = ""

    # Loan request
    loan_amount: str = ""
    loan_purpose: str = ""
    repayment_period: str = ""
    existing_loans: str = ""
    existing_loan_details: str = ""

    # Reference
    reference_full_name: str = ""
    reference_relationship: str = ""
    reference_address: str = ""
    reference_phone: str = ""
    reference_occupation: str = ""

    # Banking
    bank_name: str = ""
    account_number: str = ""
    account_type: str = ""
    branch_name: str = ""
    account_holder_name: str = ""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "coerce_numbers_to_str": True,
        "validate_assignment": True,
    }

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def update(self, **changes: Any) -> "FormState":
        """Apply field edits in place (snake_case or camelCase keys)."""
        for key, value in changes.items():
            name = key if key in type(self).model_fields else _field_for_alias(key)
            if name is None:
                raise ValueError(f"Unknown form field: {key}")
            setattr(self, name, value)
        return self


FORM_FIELDS: tuple[str, ...] = tuple(FormState.model_fields)


def _field_for_alias(alias: str) -> Optional[str]:
    for name, info in FormState.model_fields.items():
        if info.alias == alias:
            return name
    return None

