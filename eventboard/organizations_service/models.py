"""
Organization schemas.
"""

from typing import Optional

from pydantic import Field

from eventboard.common.base_model import CamelModel


class OrganizationCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class OrganizationPatch(CamelModel):
    """userId is not accepted: the owner is fixed at creation."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class OrganizationRecord(OrganizationCreate):
    id: str
    user_id: str
