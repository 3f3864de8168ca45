"""Pydantic schemas for rooms and messages.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
An empty theme or message is rejected with 422 before the Store is touched.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreatedRead(BaseModel):
    """Id of a newly created room or message."""
    id: uuid.UUID


# ─── Rooms ──────────────────────────────────────────────

class RoomCreate(BaseModel):
    theme: str = Field(..., min_length=1, max_length=255)


class RoomRead(BaseModel):
    id: uuid.UUID
    theme: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


# ─── Messages ───────────────────────────────────────────

class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class MessageRead(BaseModel):
    id: uuid.UUID
    room_id: uuid.UUID
    message: str
    reaction_count: int
    answered: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ReactionRead(BaseModel):
    id: uuid.UUID
    reaction_count: int
