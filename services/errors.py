"""
Failures the wizard can surface to the user.
Each carries a stable `kind` for API clients and a user-facing `message`.
"""
from __future__ import annotations

from typing import Literal, Optional


class WizardError(Exception):
    kind = "wizard_error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, details: Optional[dict[str, str]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class Unauthenticated(WizardError):
    kind = "unauthenticated"
    default_message = "Please log in to continue."


class ValidationFailed(WizardError):
    kind = "validation_failed"
    default_message = "Please correct the highlighted fields"

    def __init__(
        self,
        scope: Literal["step", "form"],
        details: dict[str, str],
        step: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.scope = scope
        self.step = step
        super().__init__(message, details)


class DocumentsIncomplete(WizardError):
    kind = "documents_incomplete"
    default_message = "Please upload all required documents before proceeding"


class TermsNotAgreed(WizardError):
    kind = "terms_not_agreed"
    default_message = "Please agree to the terms and conditions before submitting"


class DraftLookupFailed(WizardError):
    kind = "draft_lookup_failed"
    default_message = "Failed to save draft"


class DraftNotFound(DraftLookupFailed):
    kind = "draft_not_found"
    default_message = "This draft no longer exists or was already submitted"


class DraftPersistFailed(WizardError):
    kind = "draft_persist_failed"
    default_message = "Failed to save draft"


class TermsFetchFailed(WizardError):
    kind = "terms_fetch_failed"
    default_message = "Could not load the current terms and conditions"


class AcceptanceInsertFailed(WizardError):
    kind = "acceptance_insert_failed"
    default_message = "Could not record your acceptance of the terms"


class SubmissionPersistFailed(WizardError):
    kind = "submission_persist_failed"
    default_message = "Failed to submit application"


class InvalidTransition(WizardError):
    kind = "invalid_transition"
    default_message = "That action is not available on this step"


class WizardCompleted(WizardError):
    kind = "wizard_completed"
    default_message = "This application has already been submitted"


class SubmissionInProgress(WizardError):
    kind = "submission_in_progress"
    default_message = "Your application is being submitted"


__all__ = [
    "WizardError",
    "Unauthenticated",
    "ValidationFailed",
    "DocumentsIncomplete",
    "TermsNotAgreed",
    "DraftLookupFailed",
    "DraftNotFound",
    "DraftPersistFailed",
    "TermsFetchFailed",
    "AcceptanceInsertFailed",
    "SubmissionPersistFailed",
    "InvalidTransition",
    "WizardCompleted",
    "SubmissionInProgress",
]
