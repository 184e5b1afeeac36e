"""
User model for MongoDB (Beanie ODM).

Identity lives in Supabase (JWT); the profile lives here. A User document is
created the first time the profile form is saved (onboarding).
"""

from datetime import datetime
from typing import List, Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field


class User(Document):
    """
    User document. id is MongoDB ObjectId; external_id links to Supabase auth.
    threads and communities hold ids of the referenced documents.
    """

    external_id: Indexed(str, unique=True)  # From JWT "sub" claim
    username: Indexed(str, unique=True)  # Stored lower-case
    name: str
    image: Optional[str] = None
    bio: Optional[str] = None
    threads: List[PydanticObjectId] = Field(default_factory=list)
    communities: List[PydanticObjectId] = Field(default_factory=list)
    onboarded: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "external_id": "uuid-from-supabase",
                "username": "jane",
                "name": "Jane Doe",
                "image": "https://example.com/jane.png",
                "bio": "Hello!",
                "onboarded": True,
            }
        }
