from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import require_user
from database import get_db
from models import LoanApplication
from schemas.auth import CurrentUser
from services.records import form_from_application

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _app_to_response(app: LoanApplication) -> dict[str, Any]:
    """Serialize application to dict with camelCase for frontend."""
    return {
        "id": app.id,
        "status": app.status,
        "isDraft": app.is_draft,
        "form": form_from_application(app).model_dump(by_alias=True),
        "monthlyIncome": app.monthly_income,
        "loanAmount": app.loan_amount,
        "repaymentPeriod": app.repayment_period,
        "createdAt": app.created_at.isoformat() if app.created_at else None,
        "updatedAt": app.updated_at.isoformat() if app.updated_at else None,
        "submittedAt": app.submitted_at.isoformat() if app.submitted_at else None,
    }


@router.get("")
async def list_applications(db: AsyncSession = Depends(get_db), user: CurrentUser = Depends(require_user)):
    result = await db.execute(
        select(LoanApplication)
        .where(LoanApplication.user_id == user.id)
        .order_by(LoanApplication.updated_at.desc())
    )
    apps = result.scalars().all()
    return [_app_to_response(a) for a in apps]


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_user),
):
    result = await db.execute(
        select(LoanApplication).where(
            LoanApplication.id == application_id,
            LoanApplication.user_id == user.id,
        )
    )
    app = result.scalar_one_or_none()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    return _app_to_response(app)
