"""
Community model.

Membership is stored on both sides: Community.members and User.communities.
The actions in services.community_service keep the two in step.
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field


class Community(Document):
    external_id: Indexed(str)
    username: Indexed(str, unique=True)
    name: str
    image: Optional[str] = None
    bio: Optional[str] = None
    created_by: PydanticObjectId  # User id
    members: List[PydanticObjectId] = Field(default_factory=list)
    threads: List[PydanticObjectId] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "communities"
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "external_id": "org_123",
                "username": "pythonistas",
                "name": "Pythonistas",
                "bio": "All things Python.",
            }
        }
