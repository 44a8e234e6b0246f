"""
Mapping between the wizard's FormState and loan_applications rows.
"""
from __future__ import annotations

import uuid
from typing import Any, Callable

from models import LoanApplication
from schemas.application import FORM_FIELDS, FormState
from utils.numbers import format_number, parse_float, parse_int, strict_float, strict_int

# Submitted rows: parsed leniently (empty/unparseable -> 0)
NUMERIC_FIELDS: dict[str, Callable[[Any], Any]] = {
    "monthly_income": parse_float,
    "loan_amount": parse_float,
    "repayment_period": parse_int,
}

# Drafts: anything that is not a clean number is stored as NULL and resumes blank
DRAFT_NUMERIC_FIELDS: dict[str, Callable[[Any], Any]] = {
    "monthly_income": strict_float,
    "loan_amount": strict_float,
    "repayment_period": strict_int,
}


def new_application_id() -> str:
    return f"app-{uuid.uuid4().hex[:12]}"


def application_values(form: FormState, draft: bool = False) -> dict[str, Any]:
    """Column values for a loan_applications row built from the form."""
    parsers = DRAFT_NUMERIC_FIELDS if draft else NUMERIC_FIELDS
    values: dict[str, Any] = {}
    for name in FORM_FIELDS:
        raw = getattr(form, name)
        parser = parsers.get(name)
        values[name] = parser(raw) if parser else raw
    return values


def form_from_application(app: LoanApplication) -> FormState:
    """Rebuild form input from a stored row so a draft can be resumed."""
    data: dict[str, Any] = {}
    for name in FORM_FIELDS:
        value = getattr(app, name)
        data[name] = format_number(value) if name in NUMERIC_FIELDS else (value or "")
    return FormState.model_validate(data)
