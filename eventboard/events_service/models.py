"""
Event and participant schemas.

EventCreate is what a client may send. EventRecord is what gets stored:
organizerId and organizationId are filled in by the server from the
caller's identity and never accepted from a request body.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from eventboard.common.base_model import CamelModel


class RegistrationOptions(CamelModel):
    is_registration_required: bool = False
    requires_approval: bool = False


class Participant(CamelModel):
    id: str
    first_name: str
    last_name: str
    has_paid: bool = False
    is_approved: bool = False
    registration_date: datetime


class EventCreate(CamelModel):
    name: str = Field(..., min_length=1)
    is_public: bool = True
    registration_options: RegistrationOptions = Field(default_factory=RegistrationOptions)
    location: Optional[str] = None
    date_and_time: Optional[datetime] = None
    information: Optional[str] = None
    updates: Optional[str] = None
    payment: bool = False


class EventRecord(EventCreate):
    id: str
    organizer_id: str
    organization_id: str
    participants: List[Participant] = Field(default_factory=list)


class EventPatch(CamelModel):
    """Descriptive fields only. Ownership links and the roster are not editable here."""

    name: Optional[str] = Field(None, min_length=1)
    is_public: Optional[bool] = None
    registration_options: Optional[RegistrationOptions] = None
    location: Optional[str] = None
    date_and_time: Optional[datetime] = None
    information: Optional[str] = None
    updates: Optional[str] = None
    payment: Optional[bool] = None


class EventParticipants(CamelModel):
    """Full roster replacement, sent by the organizer."""

    participants: List[Participant]
