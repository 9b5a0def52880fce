"""
User schemas.

The confirmation field is only accepted on input; stored records never
contain it.
"""

from typing import Optional

from pydantic import Field, ValidationInfo, field_validator

from eventboard.common.base_model import CamelModel


class UserCreate(CamelModel):
    """Registration or full replacement body."""

    id: Optional[str] = None
    username: str = Field(..., min_length=3)
    first_name: str = Field(..., min_length=3)
    last_name: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    repeat_password: str = Field(..., min_length=6)

    @field_validator("repeat_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Passwords don't match")
        return value


class UserPatch(CamelModel):
    """Partial update body. A new password must come with its confirmation."""

    username: Optional[str] = Field(None, min_length=3)
    first_name: Optional[str] = Field(None, min_length=3)
    last_name: Optional[str] = Field(None, min_length=3)
    password: Optional[str] = Field(None, min_length=6)
    repeat_password: Optional[str] = Field(None, min_length=6, validate_default=True)

    @field_validator("repeat_password")
    @classmethod
    def passwords_match(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        # password is absent from info.data when it failed its own checks
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("Passwords don't match")
        return value


class UserRecord(CamelModel):
    """A user as persisted: password holds the argon2 hash."""

    id: str
    username: str = Field(..., min_length=3)
    first_name: str = Field(..., min_length=3)
    last_name: str = Field(..., min_length=3)
    password: str
