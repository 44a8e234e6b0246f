from typing import Optional

from fastapi import Depends, Header, HTTPException

from schemas.auth import CurrentUser


async def get_current_user(x_user_id: Optional[str] = Header(None)) -> Optional[CurrentUser]:
    """Identity forwarded by the auth gateway; None for anonymous requests."""
    if not x_user_id or not x_user_id.strip():
        return None
    return CurrentUser(id=x_user_id.strip())


async def require_user(user: Optional[CurrentUser] = Depends(get_current_user)) -> CurrentUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Please log in to continue.")
    return user
