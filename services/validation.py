"""
Per-step and whole-form validation of wizard input.
Pure functions: FormState in, {field: message} out. An empty dict means valid.
"""
from __future__ import annotations

import math
import re
from datetime import date
from typing import Callable, Optional

from config import settings
from schemas.application import FormState
from schemas.wizard import TOTAL_STEPS

# Step 6 (documents) and step 7 (terms) carry no form fields; they are gated by flags.
STEP_FIELDS: dict[int, tuple[str, ...]] = {
    1: (
        "first_name",
        "surname",
        "date_of_birth",
        "gender",
        "marital_status",
        "district",
        "village",
        "home_province",
    ),
    2: (
        "employment_status",
        "employer_name",
        "occupation",
        "monthly_income",
        "employment_length",
        "work_address",
        "work_phone",
    ),
    3: (
        "loan_amount",
        "loan_purpose",
        "repayment_period",
        "existing_loans",
        "existing_loan_details",
    ),
    4: (
        "reference_full_name",
        "reference_relationship",
        "reference_address",
        "reference_phone",
        "reference_occupation",
    ),
    5: (
        "bank_name",
        "account_number",
        "account_type",
        "branch_name",
        "account_holder_name",
    ),
    6: (),
    7: (),
}

# Only asked of applicants who work for an employer
EMPLOYER_FIELDS = ("employer_name", "work_address", "work_phone")

_PHONE_RE = re.compile(r"^\+?[0-9][0-9 \-]{5,19}$")
_ACCOUNT_RE = re.compile(r"^[0-9]{4,20}$")


def _label(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def _is_required(field_name: str, form: FormState) -> bool:
    if field_name in EMPLOYER_FIELDS:
        return form.employment_status.strip().lower() == "employed"
    if field_name == "existing_loan_details":
        return form.existing_loans.strip().lower() == "yes"
    return True


def _check_positive_number(value: str) -> Optional[str]:
    try:
        number = float(value)
    except ValueError:
        return "must be a number"
    if not math.isfinite(number):
        return "must be a number"
    if not number > 0:
        return "must be greater than zero"
    return None


def _check_non_negative_number(value: str) -> Optional[str]:
    try:
        number = float(value)
    except ValueError:
        return "must be a number"
    if not math.isfinite(number):
        return "must be a number"
    if number < 0:
        return "cannot be negative"
    return None


def _check_whole_months(value: str) -> Optional[str]:
    if not (value.isascii() and value.isdigit()):
        return "must be a whole number of months"
    if int(value) <= 0:
        return "must be greater than zero"
    return None


def _check_phone(value: str) -> Optional[str]:
    return None if _PHONE_RE.match(value) else "must be a valid phone number"


def _check_account_number(value: str) -> Optional[str]:
    digits = value.replace(" ", "").replace("-", "")
    return None if _ACCOUNT_RE.match(digits) else "must be 4 to 20 digits"


def _check_yes_no(value: str) -> Optional[str]:
    return None if value.lower() in ("yes", "no") else "must be yes or no"


FORMAT_CHECKS: dict[str, Callable[[str], Optional[str]]] = {
    "monthly_income": _check_non_negative_number,
    "loan_amount": _check_positive_number,
    "repayment_period": _check_whole_months,
    "work_phone": _check_phone,
    "reference_phone": _check_phone,
    "account_number": _check_account_number,
    "existing_loans": _check_yes_no,
}


def _check_date_of_birth(value: str, today: date) -> Optional[str]:
    try:
        born = date.fromisoformat(value)
    except ValueError:
        return "must be a date in YYYY-MM-DD format"
    if born >= today:
        return "must be in the past"
    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    if age < settings.min_applicant_age:
        return f"shows an applicant younger than {settings.min_applicant_age}"
    return None


def validate_step(step: int, form: FormState, today: Optional[date] = None) -> dict[str, str]:
    """Validate the fields that belong to one wizard step."""
    if step not in STEP_FIELDS:
        raise ValueError(f"Unknown wizard step: {step}")
    today = today or date.today()
    errors: dict[str, str] = {}
    for field_name in STEP_FIELDS[step]:
        value = (getattr(form, field_name) or "").strip()
        if not value:
            if _is_required(field_name, form):
                errors[field_name] = f"{_label(field_name)} is required"
            continue
        if field_name == "date_of_birth":
            problem = _check_date_of_birth(value, today)
        else:
            check = FORMAT_CHECKS.get(field_name)
            problem = check(value) if check else None
        if problem:
            errors[field_name] = f"{_label(field_name)} {problem}"
    return errors


def validate_form(form: FormState, today: Optional[date] = None) -> dict[str, str]:
    """Validate every step; used right before submission."""
    errors: dict[str, str] = {}
    for step in range(1, TOTAL_STEPS + 1):
        errors.update(validate_step(step, form, today=today))
    return errors


def is_step_valid(step: int, form: FormState) -> bool:
    return not validate_step(step, form)


def is_form_valid(form: FormState) -> bool:
    return not validate_form(form)
