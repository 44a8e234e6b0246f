from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user
from database import get_db
from schemas.auth import CurrentUser
from schemas.wizard import WizardResult, WizardStateRequest
from services.wizard import StepController

router = APIRouter(prefix="/api/wizard", tags=["wizard"])


def _result_to_response(result: WizardResult) -> dict[str, Any]:
    return result.model_dump(mode="json", by_alias=True)


@router.post("/next")
async def next_step(
    body: WizardStateRequest,
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    controller = StepController.from_state(db, user, body)
    return _result_to_response(await controller.next())


@router.post("/previous")
async def previous_step(
    body: WizardStateRequest,
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    controller = StepController.from_state(db, user, body)
    return _result_to_response(controller.previous())


@router.post("/advance")
async def advance(
    body: WizardStateRequest,
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    """Primary form button: next step, or submission on the final step."""
    controller = StepController.from_state(db, user, body)
    return _result_to_response(await controller.advance())


@router.post("/submit")
async def submit(
    body: WizardStateRequest,
    db: AsyncSession = Depends(get_db),
    user: Optional[CurrentUser] = Depends(get_current_user),
):
    controller = StepController.from_state(db, user, body)
    return _result_to_response(await controller.submit())
