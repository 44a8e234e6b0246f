"""
Terms-and-conditions versions and the record of a user accepting them for an application.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import TermsAcceptance, TermsVersion
from services.errors import AcceptanceInsertFailed, TermsFetchFailed

logger = logging.getLogger(__name__)


async def get_current_terms(session: AsyncSession) -> TermsVersion:
    """Terms version with the most recent effective date (ties: newest created, then highest id)."""
    try:
        result = await session.execute(
            select(TermsVersion)
            .order_by(
                TermsVersion.effective_date.desc(),
                TermsVersion.created_at.desc(),
                TermsVersion.id.desc(),
            )
            .limit(1)
        )
        terms = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.exception("Error fetching current terms version")
        raise TermsFetchFailed() from e
    if terms is None:
        logger.error("No terms version has been published")
        raise TermsFetchFailed("No terms and conditions have been published yet")
    return terms


async def record_acceptance(session: AsyncSession, application_id: str, user_id: str) -> TermsAcceptance:
    """
    Record that user_id accepted the current terms for application_id.
    Not idempotent: every call inserts a row, so call once per submission.
    """
    terms = await get_current_terms(session)
    acceptance = TermsAcceptance(
        id=f"tac-{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        loan_application_id=application_id,
        terms_version_id=terms.id,
        accepted_at=datetime.now(timezone.utc),
    )
    session.add(acceptance)
    try:
        await session.flush()
    except SQLAlchemyError as e:
        logger.exception("Error recording terms acceptance for application %s", application_id)
        raise AcceptanceInsertFailed() from e
    logger.info("User %s accepted terms %s for application %s", user_id, terms.id, application_id)
    return acceptance
