"""
Draft persistence: at most one open draft per user, updated in place on every save.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication
from schemas.application import FormState
from services.errors import DraftLookupFailed, DraftPersistFailed, Unauthenticated
from services.records import application_values, form_from_application, new_application_id

logger = logging.getLogger(__name__)


async def find_open_draft(session: AsyncSession, user_id: str) -> Optional[LoanApplication]:
    """Zero-or-one lookup of the user's open draft; no row is not an error."""
    try:
        result = await session.execute(
            select(LoanApplication).where(
                LoanApplication.user_id == user_id,
                LoanApplication.is_draft.is_(True),
            )
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.exception("Error checking existing draft for user_id=%s", user_id)
        raise DraftLookupFailed() from e


async def _update_draft(session: AsyncSession, draft_id: str, user_id: str, values: dict[str, Any]) -> bool:
    result = await session.execute(
        update(LoanApplication)
        .where(
            LoanApplication.id == draft_id,
            LoanApplication.user_id == user_id,
            LoanApplication.is_draft.is_(True),
        )
        .values(**values)
        .returning(LoanApplication.id)
        .execution_options(synchronize_session="fetch")
    )
    return result.scalar_one_or_none() is not None


async def _insert_draft(session: AsyncSession, user_id: str, values: dict[str, Any]) -> str:
    draft = LoanApplication(id=new_application_id(), user_id=user_id, status="draft", **values)
    session.add(draft)
    try:
        await session.flush()
    except IntegrityError:
        # Lost the race against another tab creating this user's draft; write into that one
        await session.rollback()
        logger.warning("Open draft already exists for user_id=%s, saving into it instead", user_id)
        existing = await find_open_draft(session, user_id)
        if existing is None or not await _update_draft(session, existing.id, user_id, values):
            raise DraftPersistFailed()
        return existing.id
    return draft.id


async def save_draft(
    session: AsyncSession,
    form: FormState,
    user_id: Optional[str],
    existing_draft_id: Optional[str] = None,
) -> str:
    """
    Persist the form as the user's draft and return the draft id.
    With existing_draft_id the row is overwritten (last write wins); otherwise the user's
    open draft is reused, and only when there is none is a new row inserted.
    """
    if not user_id:
        raise Unauthenticated("Please log in to save your application.")

    values = {**application_values(form, draft=True), "is_draft": True}
    try:
        if existing_draft_id:
            if not await _update_draft(session, existing_draft_id, user_id, values):
                logger.warning("Draft %s not found for user_id=%s", existing_draft_id, user_id)
                raise DraftPersistFailed("This draft no longer exists or was already submitted")
            draft_id = existing_draft_id
        else:
            existing = await find_open_draft(session, user_id)
            if existing is not None:
                if not await _update_draft(session, existing.id, user_id, values):
                    raise DraftPersistFailed()
                draft_id = existing.id
            else:
                draft_id = await _insert_draft(session, user_id, values)
    except SQLAlchemyError as e:
        logger.exception("Error saving draft for user_id=%s", user_id)
        raise DraftPersistFailed() from e

    logger.info("Saved draft %s for user_id=%s", draft_id, user_id)
    return draft_id


async def load_draft(
    session: AsyncSession,
    user_id: str,
    draft_id: Optional[str] = None,
) -> Optional[tuple[str, FormState]]:
    """Return (draft_id, form) for the pinned draft, or the user's open draft when none is pinned."""
    if draft_id is None:
        draft = await find_open_draft(session, user_id)
    else:
        try:
            result = await session.execute(
                select(LoanApplication).where(
                    LoanApplication.id == draft_id,
                    LoanApplication.user_id == user_id,
                    LoanApplication.is_draft.is_(True),
                )
            )
            draft = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.exception("Error loading draft %s for user_id=%s", draft_id, user_id)
            raise DraftLookupFailed() from e
    if draft is None:
        return None
    return draft.id, form_from_application(draft)
