"""
Step controller for the seven-step loan application wizard.

Owns the form state and the current step for one wizard session, gates every transition
(step validation, document readiness, terms agreement, whole-form validation) and
delegates persistence to the draft store, the submission committer and the terms
recorder. Every action returns a WizardResult; failures never raise out of an action.

Submission order: the application is committed first and the terms acceptance is recorded
against the id the commit returned, in the same transaction. If either step fails the
transaction is rolled back, so there is no submitted record without its acceptance and
no acceptance without its record.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from schemas.application import FormState
from schemas.auth import CurrentUser
from schemas.wizard import DOCUMENTS_STEP, TERMS_STEP, TOTAL_STEPS, WizardResult, WizardStateRequest
from services import drafts, submission, terms, validation
from services.errors import (
    DocumentsIncomplete,
    DraftNotFound,
    DraftPersistFailed,
    InvalidTransition,
    SubmissionInProgress,
    SubmissionPersistFailed,
    TermsNotAgreed,
    Unauthenticated,
    ValidationFailed,
    WizardCompleted,
    WizardError,
)
from services.notifications import NotificationChannel, Notifier

logger = logging.getLogger(__name__)

SaveDraft = Callable[[AsyncSession, FormState, Optional[str], Optional[str]], Awaitable[str]]
CommitApplication = Callable[[AsyncSession, FormState, Optional[str], Optional[str]], Awaitable[str]]
RecordAcceptance = Callable[[AsyncSession, str, str], Awaitable[Any]]


class StepController:
    def __init__(
        self,
        session: AsyncSession,
        user: Optional[CurrentUser],
        form: Optional[FormState] = None,
        current_step: int = 1,
        draft_id: Optional[str] = None,
        documents_valid: bool = False,
        terms_agreed: bool = False,
        notifier: Optional[Notifier] = None,
        autosave: Optional[bool] = None,
        save_draft: SaveDraft = drafts.save_draft,
        commit_application: CommitApplication = submission.commit_application,
        record_acceptance: RecordAcceptance = terms.record_acceptance,
    ):
        if not 1 <= current_step <= TOTAL_STEPS:
            raise ValueError(f"current_step must be between 1 and {TOTAL_STEPS}, got {current_step}")
        self.session = session
        self.user = user
        self.form = form if form is not None else FormState()
        self.current_step = current_step
        self.draft_id = draft_id
        self.documents_valid = documents_valid
        self.terms_agreed = terms_agreed
        self.autosave = settings.autosave_on_advance if autosave is None else autosave
        self.completed = False
        self.is_submitting = False
        self.application_id: Optional[str] = None

        self._save_draft = save_draft
        self._commit_application = commit_application
        self._record_acceptance = record_acceptance
        self._notifications = NotificationChannel(notifier)

    @classmethod
    def from_state(cls, session: AsyncSession, user: Optional[CurrentUser], state: WizardStateRequest, **kwargs: Any) -> "StepController":
        return cls(
            session,
            user,
            form=state.form,
            current_step=state.current_step,
            draft_id=state.draft_id,
            documents_valid=state.documents_valid,
            terms_agreed=state.terms_agreed,
            **kwargs,
        )

    @classmethod
    async def resume(
        cls,
        session: AsyncSession,
        user: Optional[CurrentUser],
        draft_id: Optional[str] = None,
        **kwargs: Any,
    ) -> "StepController":
        """Controller on step 1 holding the pinned draft, or the user's open draft, or an empty form."""
        if user is None:
            raise Unauthenticated("Please log in to continue your application.")
        loaded = await drafts.load_draft(session, user.id, draft_id)
        if loaded is None:
            if draft_id is not None:
                raise DraftNotFound()
            return cls(session, user, **kwargs)
        found_id, form = loaded
        return cls(session, user, form=form, draft_id=found_id, **kwargs)

    def to_state(self) -> WizardStateRequest:
        return WizardStateRequest(
            current_step=self.current_step,
            form=self.form,
            documents_valid=self.documents_valid,
            terms_agreed=self.terms_agreed,
            draft_id=self.draft_id,
        )

    @property
    def can_go_back(self) -> bool:
        return self.current_step > 1 and not self.completed

    @property
    def is_final_step(self) -> bool:
        return self.current_step == TERMS_STEP

    # Transitions

    async def next(self) -> WizardResult:
        """Move to the following step once the current one is valid."""
        try:
            self._ensure_editable()
            if self.is_final_step:
                raise InvalidTransition("Submit the application to finish")
            self._check_current_step()
            if self.current_step == DOCUMENTS_STEP and not self.documents_valid:
                raise DocumentsIncomplete("Please upload all required documents before proceeding")
        except WizardError as error:
            return self._refuse(error)

        location = None
        if self.autosave and self.user is not None:
            try:
                location = await self._store_draft()
            except WizardError as error:
                return self._refuse(error)

        self.current_step += 1
        logger.info("Wizard advanced to step %s (draft=%s)", self.current_step, self.draft_id)
        return self._result("advanced", location=location)

    def previous(self) -> WizardResult:
        try:
            self._ensure_editable()
        except WizardError as error:
            return self._refuse(error)
        self.current_step = max(1, self.current_step - 1)
        return self._result("moved_back")

    async def advance(self) -> WizardResult:
        """Primary button: "Next" on steps 1-6, "Submit Application" on step 7."""
        if self.is_final_step:
            return await self.submit()
        return await self.next()

    async def submit(self) -> WizardResult:
        try:
            self._ensure_editable()
            if not self.is_final_step:
                raise InvalidTransition("The application can only be submitted from the final step")
            if not self.documents_valid:
                raise DocumentsIncomplete("Please upload all required documents before submitting")
            if not self.terms_agreed:
                raise TermsNotAgreed()
            errors = validation.validate_form(self.form)
            if errors:
                raise ValidationFailed("form", errors, message="Please complete all required fields before submitting")
            if self.user is None:
                raise Unauthenticated("You must be logged in to submit an application")
        except Unauthenticated as error:
            return self._refuse(error, redirect=settings.login_path)
        except WizardError as error:
            return self._refuse(error)

        self.is_submitting = True
        try:
            application_id = await self._commit_application(self.session, self.form, self.user.id, self.draft_id)
            await self._record_acceptance(self.session, application_id, self.user.id)
            await self._commit_unit(SubmissionPersistFailed)
        except WizardError as error:
            await self.session.rollback()
            return self._refuse(error)
        finally:
            self.is_submitting = False

        self.completed = True
        self.application_id = application_id
        logger.info("Wizard completed with application %s", application_id)
        self._notifications.success("Application submitted successfully!")
        return self._result("submitted", redirect=settings.dashboard_path)

    async def save_draft(self) -> WizardResult:
        """Persist the form as the user's draft without changing step."""
        try:
            self._ensure_editable()
        except WizardError as error:
            return self._refuse(error)
        if self.user is None:
            return self._refuse(
                Unauthenticated("Please log in to save your application."),
                redirect=settings.login_path,
            )
        try:
            location = await self._store_draft()
        except WizardError as error:
            return self._refuse(error)
        self._notifications.success("Draft saved successfully")
        return self._result("draft_saved", location=location)

    # Internals

    def _ensure_editable(self) -> None:
        if self.completed:
            raise WizardCompleted()
        if self.is_submitting:
            raise SubmissionInProgress()

    def _check_current_step(self) -> None:
        errors = validation.validate_step(self.current_step, self.form)
        if errors:
            raise ValidationFailed("step", errors, step=self.current_step)

    async def _store_draft(self) -> Optional[str]:
        """Save and commit the draft; returns the new location when a draft was created."""
        pinned = self.draft_id
        try:
            draft_id = await self._save_draft(self.session, self.form, self.user.id, pinned)
            await self._commit_unit(DraftPersistFailed)
        except WizardError:
            await self.session.rollback()
            raise
        self.draft_id = draft_id
        # Only a newly pinned draft needs to be reflected into the location
        return None if pinned else settings.draft_location(draft_id)

    async def _commit_unit(self, failure: type[WizardError]) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.exception("Commit failed (%s)", failure.kind)
            raise failure() from e

    def _refuse(self, error: WizardError, redirect: Optional[str] = None) -> WizardResult:
        logger.debug("Step %s refused: %s (%s)", self.current_step, error.kind, error.message)
        self._notifications.error(error.message)
        return self._result(error.kind, ok=False, message=error.message, errors=error.details, redirect=redirect)

    def _result(
        self,
        kind: str,
        ok: bool = True,
        message: Optional[str] = None,
        errors: Optional[dict[str, str]] = None,
        location: Optional[str] = None,
        redirect: Optional[str] = None,
    ) -> WizardResult:
        return WizardResult(
            ok=ok,
            kind=kind,
            current_step=self.current_step,
            completed=self.completed,
            draft_id=self.draft_id,
            application_id=self.application_id,
            errors=errors or {},
            message=message,
            location=location,
            redirect=redirect,
            notifications=self._notifications.drain(),
        )
