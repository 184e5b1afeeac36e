"""Profile (onboarding / edit profile) form validation."""

from pydantic import BaseModel, Field


class UserValidation(BaseModel):
    profile_photo: str = Field(min_length=1)
    name: str = Field(min_length=3, max_length=30)
    username: str = Field(min_length=3, max_length=30)
    bio: str = Field(min_length=3, max_length=1000)
