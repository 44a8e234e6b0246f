from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from schemas.terms import TermsVersionResponse
from services.errors import TermsFetchFailed
from services.terms import get_current_terms

router = APIRouter(prefix="/api/terms", tags=["terms"])


@router.get("/current")
async def current_terms(db: AsyncSession = Depends(get_db)):
    try:
        terms = await get_current_terms(db)
    except TermsFetchFailed as e:
        # No underlying store error means nothing has been published
        status_code = 503 if e.__cause__ is not None else 404
        raise HTTPException(status_code=status_code, detail=e.message) from e
    return TermsVersionResponse.model_validate(terms).model_dump(mode="json", by_alias=True)
