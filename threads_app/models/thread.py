"""
Thread model.

A thread is a post; replies are threads too. A reply stores its parent's id
as a plain string in parent_id and the parent lists the reply in children.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document, PydanticObjectId
from pydantic import Field


class Thread(Document):
    text: str
    author: PydanticObjectId  # User id
    community: Optional[PydanticObjectId] = None  # Community id
    created_at: datetime = Field(default_factory=datetime.utcnow)
    parent_id: Optional[str] = None  # Not a reference; None for top-level threads
    children: List[PydanticObjectId] = Field(default_factory=list)

    class Settings:
        name = "threads"
        use_state_management = True

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None
