"""
ChatMessage model - one turn of the advisory conversation.
"""

from enum import Enum
from datetime import datetime
from sqlmodel import SQLModel, Field

from models.asset import new_id, utc_now


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(SQLModel):
    """Represents a chat message. Transcripts only ever append these."""
    id: str = Field(default_factory=new_id)
    role: ChatRole
    text: str
    timestamp: datetime = Field(default_factory=utc_now)
