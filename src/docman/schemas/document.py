"""Pydantic schemas for documents."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DocumentRead(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    role_id: Optional[uuid.UUID] = None
    title: str
    content: str
    date_created: datetime

    model_config = {"from_attributes": True}
