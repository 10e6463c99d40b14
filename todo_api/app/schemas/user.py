"""
Pydantic models for user data.

Passwords and tokens are accepted on input only; ``UserRead`` is the
public profile and carries nothing but the id and email.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError


class UserCreate(BaseModel):
    """Schema for registering a user."""

    email: EmailStr = Field(..., examples=["user@example.com"])
    password: str = Field(..., examples=["strongpassword"])


class UserLogin(BaseModel):
    """Schema for logging in.

    A well-formed email is normalised exactly as ``EmailStr`` does at
    signup, so it matches the stored address.  A malformed one is only
    stripped and then fails like an unknown address.
    """

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        try:
            return validate_email(value)[1]
        except PydanticCustomError:
            return value.strip()


class UserRead(BaseModel):
    """Public profile of a user."""

    id: str
    email: str

    model_config = {
        "from_attributes": True,
    }
