from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user
from database import get_db
from schemas.auth import CurrentUser
from schemas.wizard import WizardStateRequest
from services.errors import DraftLookupFailed, DraftNotFound, Unauthenticated
from services.wizard import StepController

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


@router.post("")
async def save_draft(
    body: WizardStateRequest,
    draft: Optional[str] = Query(None, description="Draft id carried in the page location"),
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    state = body.model_copy(update={"draft_id": draft or body.draft_id})
    controller = StepController.from_state(db, user, state)
    result = await controller.save_draft()
    return result.model_dump(mode="json", by_alias=True)


@router.get("/current")
async def resume_draft(
    draft: Optional[str] = Query(None, description="Draft id carried in the page location"),
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    """Wizard state for the pinned draft, the user's open draft, or a blank form."""
    try:
        controller = await StepController.resume(db, user, draft)
    except Unauthenticated as e:
        raise HTTPException(status_code=401, detail=e.message) from e
    except DraftNotFound as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except DraftLookupFailed as e:
        raise HTTPException(status_code=503, detail=e.message) from e
    return controller.to_state().model_dump(mode="json", by_alias=True)
