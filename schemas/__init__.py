from schemas.application import FORM_FIELDS, ApplicationStatus, FormState
from schemas.auth import CurrentUser
from schemas.terms import TermsVersionResponse
from schemas.wizard import (
    DOCUMENTS_STEP,
    TERMS_STEP,
    TOTAL_STEPS,
    Notification,
    WizardResult,
    WizardStateRequest,
)

__all__ = [
    "FORM_FIELDS",
    "ApplicationStatus",
    "FormState",
    "CurrentUser",
    "TermsVersionResponse",
    "DOCUMENTS_STEP",
    "TERMS_STEP",
    "TOTAL_STEPS",
    "Notification",
    "WizardResult",
    "WizardStateRequest",
]
