"""
Step controller: gating, ordering of persistence calls and terminal state.
Collaborators are replaced with AsyncMocks so every persistence call can be counted.
"""
import unittest
from unittest.mock import AsyncMock, Mock

from schemas.auth import CurrentUser
from services.errors import AcceptanceInsertFailed, DraftPersistFailed, SubmissionPersistFailed
from services.validation import STEP_FIELDS
from services.wizard import StepController
from tests.support import valid_form

USER = CurrentUser(id="user-1")


class ControllerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.session = AsyncMock()
        self.save_draft = AsyncMock(return_value="app-draft1")
        self.commit_application = AsyncMock(return_value="app-final1")
        self.record_acceptance = AsyncMock()
        self.notifier = Mock()

    def make(self, user=USER, **kwargs):
        kwargs.setdefault("form", valid_form())
        kwargs.setdefault("autosave", False)
        return StepController(
            self.session,
            user,
            notifier=self.notifier,
            save_draft=self.save_draft,
            commit_application=self.commit_application,
            record_acceptance=self.record_acceptance,
            **kwargs,
        )

    def assert_no_persistence(self):
        self.save_draft.assert_not_awaited()
        self.commit_application.assert_not_awaited()
        self.record_acceptance.assert_not_awaited()
        self.session.commit.assert_not_awaited()


class TestNext(ControllerTestCase):
    async def test_invalid_required_field_blocks_every_step(self):
        for step in range(1, 6):
            field_name = STEP_FIELDS[step][0]
            with self.subTest(step=step, field=field_name):
                controller = self.make(current_step=step, form=valid_form(**{field_name: ""}))
                result = await controller.next()
                self.assertFalse(result.ok)
                self.assertEqual(result.kind, "validation_failed")
                self.assertIn(field_name, result.errors)
                self.assertEqual(result.current_step, step)
                self.assertEqual(controller.current_step, step)

    async def test_valid_step_advances(self):
        controller = self.make(current_step=2)
        result = await controller.next()
        self.assertTrue(result.ok)
        self.assertEqual(result.kind, "advanced")
        self.assertEqual(controller.current_step, 3)
        self.assert_no_persistence()

    async def test_non_ascii_digit_months_refused(self):
        controller = self.make(current_step=3, form=valid_form(repayment_period="\u00b2"))
        result = await controller.next()
        self.assertEqual(result.kind, "validation_failed")
        self.assertIn("repayment_period", result.errors)
        self.assertEqual(controller.current_step, 3)

    async def test_documents_step_needs_documents(self):
        controller = self.make(current_step=6, documents_valid=False)
        result = await controller.next()
        self.assertEqual(result.kind, "documents_incomplete")
        self.assertEqual(result.message, "Please upload all required documents before proceeding")
        self.assertEqual(controller.current_step, 6)

    async def test_documents_step_with_documents_reaches_terms(self):
        controller = self.make(current_step=6, documents_valid=True)
        result = await controller.next()
        self.assertTrue(result.ok)
        self.assertEqual(controller.current_step, 7)
        self.assertTrue(controller.is_final_step)

    async def test_no_next_from_final_step(self):
        controller = self.make(current_step=7, documents_valid=True, terms_agreed=True)
        result = await controller.next()
        self.assertEqual(result.kind, "invalid_transition")
        self.assertEqual(controller.current_step, 7)
        self.assert_no_persistence()

    async def test_autosave_pins_draft_before_advancing(self):
        controller = self.make(current_step=1, autosave=True)
        result = await controller.next()
        self.assertTrue(result.ok)
        self.assertEqual(controller.current_step, 2)
        self.assertEqual(controller.draft_id, "app-draft1")
        self.assertEqual(result.location, "/apply?draft=app-draft1")
        self.save_draft.assert_awaited_once_with(self.session, controller.form, "user-1", None)

    async def test_autosave_failure_keeps_step(self):
        self.save_draft.side_effect = DraftPersistFailed()
        controller = self.make(current_step=1, autosave=True)
        result = await controller.next()
        self.assertFalse(result.ok)
        self.assertEqual(result.kind, "draft_persist_failed")
        self.assertEqual(controller.current_step, 1)
        self.session.rollback.assert_awaited()


class TestPrevious(ControllerTestCase):
    def test_moves_back_without_validation(self):
        controller = self.make(current_step=4, form=valid_form(first_name=""))
        result = controller.previous()
        self.assertTrue(result.ok)
        self.assertEqual(controller.current_step, 3)

    def test_never_below_first_step(self):
        controller = self.make(current_step=1)
        self.assertFalse(controller.can_go_back)
        controller.previous()
        self.assertEqual(controller.current_step, 1)


class TestSubmitGuards(ControllerTestCase):
    async def test_documents_incomplete(self):
        controller = self.make(current_step=7, documents_valid=False, terms_agreed=True)
        result = await controller.submit()
        self.assertEqual(result.kind, "documents_incomplete")
        self.assertEqual(result.message, "Please upload all required documents before submitting")
        self.assert_no_persistence()

    async def test_terms_not_agreed(self):
        controller = self.make(current_step=7, documents_valid=True, terms_agreed=False)
        result = await controller.submit()
        self.assertEqual(result.kind, "terms_not_agreed")
        self.assertEqual(result.message, "Please agree to the terms and conditions before submitting")
        self.assert_no_persistence()

    async def test_documents_checked_before_terms(self):
        controller = self.make(current_step=7, documents_valid=False, terms_agreed=False)
        result = await controller.submit()
        self.assertEqual(result.kind, "documents_incomplete")

    async def test_whole_form_validated(self):
        controller = self.make(current_step=7, documents_valid=True, terms_agreed=True, form=valid_form(surname=""))
        result = await controller.submit()
        self.assertEqual(result.kind, "validation_failed")
        self.assertIn("surname", result.errors)
        self.assertEqual(controller.current_step, 7)
        self.assert_no_persistence()

    async def test_non_ascii_digit_months_refused_on_submit(self):
        controller = self.make(current_step=7, documents_valid=True, terms_agreed=True, form=valid_form(repayment_period="\u00b2"))
        result = await controller.submit()
        self.assertEqual(result.kind, "validation_failed")
        self.assertIn("repayment_period", result.errors)
        self.assert_no_persistence()

    async def test_only_from_final_step(self):
        controller = self.make(current_step=5, documents_valid=True, terms_agreed=True)
        result = await controller.submit()
        self.assertEqual(result.kind, "invalid_transition")
        self.assert_no_persistence()

    async def test_unauthenticated(self):
        controller = self.make(user=None, current_step=7, documents_valid=True, terms_agreed=True)
        result = await controller.submit()
        self.assertEqual(result.kind, "unauthenticated")
        self.assertEqual(result.redirect, "/login")
        self.assert_no_persistence()


class TestSubmit(ControllerTestCase):
    def ready(self, **kwargs):
        return self.make(current_step=7, documents_valid=True, terms_agreed=True, **kwargs)

    async def test_commit_then_acceptance_against_committed_id(self):
        calls = []
        self.commit_application.side_effect = lambda *args: calls.append("commit") or "app-final1"
        self.record_acceptance.side_effect = lambda *args: calls.append("accept")

        controller = self.ready(draft_id="app-draft1")
        result = await controller.submit()

        self.assertTrue(result.ok)
        self.assertEqual(calls, ["commit", "accept"])
        self.commit_application.assert_awaited_once_with(self.session, controller.form, "user-1", "app-draft1")
        self.record_acceptance.assert_awaited_once_with(self.session, "app-final1", "user-1")
        self.session.commit.assert_awaited_once()
        self.assertEqual(result.application_id, "app-final1")

    async def test_success_is_terminal(self):
        controller = self.ready()
        result = await controller.submit()

        self.assertEqual(result.kind, "submitted")
        self.assertTrue(result.completed)
        self.assertEqual(result.redirect, "/dashboard")
        self.assertEqual([(n.level, n.message) for n in result.notifications], [("success", "Application submitted successfully!")])
        self.notifier.assert_called_once()

        for action in (controller.next, controller.submit, controller.save_draft, controller.advance):
            later = await action()
            self.assertEqual(later.kind, "wizard_completed")
        self.assertEqual(controller.previous().kind, "wizard_completed")
        self.assertFalse(controller.can_go_back)
        self.commit_application.assert_awaited_once()
        self.record_acceptance.assert_awaited_once()
        self.save_draft.assert_not_awaited()

    async def test_acceptance_failure_rolls_back_commit(self):
        self.record_acceptance.side_effect = AcceptanceInsertFailed()
        controller = self.ready()
        result = await controller.submit()

        self.assertFalse(result.ok)
        self.assertEqual(result.kind, "acceptance_insert_failed")
        self.assertFalse(controller.completed)
        self.assertFalse(controller.is_submitting)
        self.assertEqual(controller.current_step, 7)
        self.session.rollback.assert_awaited_once()
        self.session.commit.assert_not_awaited()

    async def test_commit_failure_skips_acceptance(self):
        self.commit_application.side_effect = SubmissionPersistFailed()
        controller = self.ready()
        result = await controller.submit()

        self.assertEqual(result.kind, "submission_persist_failed")
        self.assertEqual(result.message, "Failed to submit application")
        self.record_acceptance.assert_not_awaited()
        self.session.rollback.assert_awaited_once()

    async def test_failed_submission_can_be_retried_by_user(self):
        self.commit_application.side_effect = [SubmissionPersistFailed(), "app-final1"]
        controller = self.ready()
        self.assertFalse((await controller.submit()).ok)
        self.assertTrue((await controller.submit()).ok)
        self.assertEqual(self.commit_application.await_count, 2)

    async def test_advance_on_final_step_submits(self):
        controller = self.ready()
        result = await controller.advance()
        self.assertEqual(result.kind, "submitted")

    async def test_advance_below_final_step_moves_on(self):
        controller = self.make(current_step=3)
        result = await controller.advance()
        self.assertEqual(result.kind, "advanced")
        self.assert_no_persistence()


class TestSaveDraft(ControllerTestCase):
    async def test_unauthenticated(self):
        controller = self.make(user=None, current_step=3)
        result = await controller.save_draft()

        self.assertFalse(result.ok)
        self.assertEqual(result.message, "Please log in to save your application.")
        self.assertEqual(result.redirect, "/login")
        self.assertEqual(result.notifications[0].level, "error")
        self.assertEqual(controller.current_step, 3)
        self.assert_no_persistence()
        self.session.rollback.assert_not_awaited()

    async def test_new_draft_is_pinned_and_located(self):
        controller = self.make(current_step=3)
        result = await controller.save_draft()

        self.assertTrue(result.ok)
        self.assertEqual(result.kind, "draft_saved")
        self.assertEqual(result.draft_id, "app-draft1")
        self.assertEqual(result.location, "/apply?draft=app-draft1")
        self.assertEqual(result.current_step, 3)
        self.assertEqual(result.notifications[0].message, "Draft saved successfully")
        self.session.commit.assert_awaited_once()

        again = await controller.save_draft()
        self.assertIsNone(again.location)
        self.assertEqual(self.save_draft.await_args_list[1].args[3], "app-draft1")

    async def test_pinned_draft_location_unchanged(self):
        controller = self.make(draft_id="app-draft1")
        result = await controller.save_draft()
        self.assertIsNone(result.location)
        self.save_draft.assert_awaited_once_with(self.session, controller.form, "user-1", "app-draft1")

    async def test_failure_leaves_state(self):
        self.save_draft.side_effect = DraftPersistFailed()
        controller = self.make(current_step=2)
        result = await controller.save_draft()

        self.assertEqual(result.kind, "draft_persist_failed")
        self.assertEqual(result.message, "Failed to save draft")
        self.assertIsNone(controller.draft_id)
        self.session.rollback.assert_awaited_once()

    async def test_notifier_failure_does_not_break_action(self):
        self.notifier.side_effect = RuntimeError("toast service down")
        controller = self.make()
        with self.assertLogs("services.notifications", level="ERROR"):
            result = await controller.save_draft()
        self.assertTrue(result.ok)
        self.assertEqual(len(result.notifications), 1)


class TestConstruction(unittest.TestCase):
    def test_step_out_of_range(self):
        with self.assertRaises(ValueError):
            StepController(AsyncMock(), USER, current_step=8)

    def test_round_trips_client_state(self):
        controller = StepController(AsyncMock(), USER, form=valid_form(), current_step=4, draft_id="app-1", documents_valid=True)
        restored = StepController.from_state(AsyncMock(), USER, controller.to_state())
        self.assertEqual(restored.current_step, 4)
        self.assertEqual(restored.draft_id, "app-1")
        self.assertTrue(restored.documents_valid)
        self.assertEqual(restored.form, controller.form)


if __name__ == "__main__":
    unittest.main()
