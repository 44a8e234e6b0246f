from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class TermsVersionResponse(BaseModel):
    id: str
    title: str
    content: Optional[str] = None
    effective_date: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}
