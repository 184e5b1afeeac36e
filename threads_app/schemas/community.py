"""Community form validation."""

from typing import Optional

from pydantic import BaseModel, Field


class CommunityValidation(BaseModel):
    """
    Create-community form. external_id is the id issued by the identity
    provider for the organization; one is generated when omitted.
    """

    external_id: Optional[str] = None
    name: str = Field(min_length=3, max_length=30)
    username: str = Field(min_length=3, max_length=30)
    image: str = ""
    bio: str = Field(default="", max_length=1000)


class CommunityUpdate(BaseModel):
    name: str = Field(min_length=3, max_length=30)
    username: str = Field(min_length=3, max_length=30)
    image: str = ""
