"""
Final commit of a loan application: promotes the user's draft, or inserts a new row, with status 'pending'.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import LoanApplication
from schemas.application import FormState
from services.errors import SubmissionPersistFailed, Unauthenticated
from services.records import application_values, new_application_id

logger = logging.getLogger(__name__)


async def commit_application(
    session: AsyncSession,
    form: FormState,
    user_id: Optional[str],
    existing_draft_id: Optional[str] = None,
) -> str:
    """
    Write the submitted application and return its id.

    A draft is only promoted while it still belongs to user_id and is in status 'draft';
    a stale client resubmitting an already submitted record matches no row and fails.
    """
    if not user_id:
        raise Unauthenticated("You must be logged in to submit an application")

    values = {
        **application_values(form),
        "status": "pending",
        "is_draft": False,
        "submitted_at": datetime.now(timezone.utc),
    }
    try:
        if existing_draft_id:
            result = await session.execute(
                update(LoanApplication)
                .where(
                    LoanApplication.id == existing_draft_id,
                    LoanApplication.user_id == user_id,
                    LoanApplication.status == "draft",
                )
                .values(**values)
                .returning(LoanApplication.id)
                .execution_options(synchronize_session="fetch")
            )
            application_id = result.scalar_one_or_none()
            if application_id is None:
                logger.warning(
                    "Draft %s for user_id=%s is missing or no longer a draft; nothing submitted",
                    existing_draft_id,
                    user_id,
                )
                raise SubmissionPersistFailed("This application has already been submitted or no longer exists")
        else:
            app = LoanApplication(id=new_application_id(), user_id=user_id, **values)
            session.add(app)
            await session.flush()
            application_id = app.id
    except SQLAlchemyError as e:
        logger.exception("Error submitting application for user_id=%s", user_id)
        raise SubmissionPersistFailed() from e

    logger.info("Application %s submitted for user_id=%s", application_id, user_id)
    return application_id
