from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from schemas.application import FormState

TOTAL_STEPS = 7
DOCUMENTS_STEP = 6
TERMS_STEP = 7


class Notification(BaseModel):
    level: Literal["success", "error", "info"]
    message: str


class WizardStateRequest(BaseModel):
    """Wizard state as held by the client between actions."""

    current_step: int = Field(1, ge=1, le=TOTAL_STEPS)
    form: FormState = Field(default_factory=FormState)
    documents_valid: bool = False
    terms_agreed: bool = False
    draft_id: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class WizardResult(BaseModel):
    ok: bool
    kind: str
    current_step: int
    completed: bool = False
    draft_id: Optional[str] = None
    application_id: Optional[str] = None
    errors: dict[str, str] = Field(default_factory=dict)
    message: Optional[str] = None
    # Location to reflect into the address bar (same page, new draft id)
    location: Optional[str] = None
    # Page the client should navigate to (login, dashboard)
    redirect: Optional[str] = None
    notifications: list[Notification] = Field(default_factory=list)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
