"""Pydantic schemas for journal messages.

- MessageCreate: what you POST (optional client-generated id for offline sync)
- MessageUpdate: what you PUT to replace the content
- MessageRead: what the API returns — never includes the owner id
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

MAX_CONTENT_LENGTH = 10_000


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    id: Optional[uuid.UUID] = None


class MessageUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class MessageRead(BaseModel):
    id: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MessageList(BaseModel):
    messages: list[MessageRead]
