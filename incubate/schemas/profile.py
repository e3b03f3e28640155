"""
Profile Schemas
===============

The local user's display name and streak, shown on the home screen.
"""

from pydantic import BaseModel, Field, field_validator


class UserProfile(BaseModel):
    """Persisted user preferences."""

    first_name: str = Field(default="friend", min_length=1, max_length=100)
    streak_count: int = Field(default=0, ge=0)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("first_name must not be blank")
        return v

    @property
    def welcome_message(self) -> str:
        return f"Welcome back, {self.first_name}"
