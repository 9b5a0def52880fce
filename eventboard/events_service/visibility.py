"""
Event visibility rules.

Decides, for one event and one (possibly anonymous) caller, whether the
event is shown in full, shown with some fields withheld, or left out.

Rules, first match wins:
1. The organizer sees their own event in full.
2. An anonymous caller looking at an event that is private or has any
   registration machinery gets it without organizationId and participants.
3. A signed-in caller looking at a private event:
   - registered (and approved, where approval is required): full event;
   - registered but still pending approval: roster withheld;
   - not registered, or the event takes no registrations: organizationId
     and roster withheld.
4. Public events are shown in full to everyone.
5. Anything else (a record with no usable isPublic flag) is left out.

The functions here are pure: they never modify the event passed in.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from eventboard.auth_service.utils import Identity

Event = Dict[str, Any]

ROSTER_FIELDS = ("participants",)
INTERNAL_FIELDS = ("organizationId", "participants")


class Visibility(Enum):
    FULL = "full"
    HIDE_ROSTER = "hide_roster"
    HIDE_INTERNALS = "hide_internals"
    OMIT = "omit"


@dataclass(frozen=True)
class VisibilityPolicy:
    """
    Tunable parts of the rules.

    omit_private_for_anonymous: leave private events out of anonymous
        listings entirely instead of showing them with fields withheld.
    """

    omit_private_for_anonymous: bool = False


DEFAULT_POLICY = VisibilityPolicy()


def _find_participant(event: Event, caller: Identity) -> Optional[Dict[str, Any]]:
    for participant in event.get("participants") or []:
        if participant.get("id") == caller.id:
            return participant
    return None


def decide(
    event: Event, caller: Optional[Identity], policy: VisibilityPolicy = DEFAULT_POLICY
) -> Visibility:
    """
    Work out how much of event the caller may see.

    Args:
        event (dict): Stored event record (camelCase keys).
        caller (Identity): The caller, or None when anonymous.
        policy (VisibilityPolicy): Tunable rule switches.

    Returns:
        Visibility: FULL, HIDE_ROSTER, HIDE_INTERNALS or OMIT.
    """
    options = event.get("registrationOptions") or {}
    registration_required = options.get("isRegistrationRequired") is True
    requires_approval = options.get("requiresApproval") is True
    is_public = event.get("isPublic")

    if caller is not None and event.get("organizerId") == caller.id:
        return Visibility.FULL

    if caller is None and (registration_required or requires_approval or is_public is False):
        if is_public is False and policy.omit_private_for_anonymous:
            return Visibility.OMIT
        return Visibility.HIDE_INTERNALS

    if caller is not None and not is_public:
        if "participants" not in event:
            # Roster already withheld by an earlier pass; keep what is left.
            return Visibility.FULL

        participant = _find_participant(event, caller)
        if registration_required and participant is not None:
            if not requires_approval or participant.get("isApproved") is True:
                return Visibility.FULL
            return Visibility.HIDE_ROSTER
        return Visibility.HIDE_INTERNALS

    if is_public is True:
        return Visibility.FULL

    return Visibility.OMIT


def redact(event: Event, fields: Tuple[str, ...]) -> Event:
    """Copy of event without the given keys."""
    return {key: value for key, value in event.items() if key not in fields}


def filter_event(
    event: Event, caller: Optional[Identity], policy: VisibilityPolicy = DEFAULT_POLICY
) -> Optional[Event]:
    """
    Apply the visibility rules to a single event.

    Returns:
        dict: The event as the caller may see it, or None if it should be
        left out of the response.
    """
    visibility = decide(event, caller, policy)

    if visibility is Visibility.FULL:
        return event
    if visibility is Visibility.HIDE_ROSTER:
        return redact(event, ROSTER_FIELDS)
    if visibility is Visibility.HIDE_INTERNALS:
        return redact(event, INTERNAL_FIELDS)
    return None


def filter_events(
    events: Iterable[Event], caller: Optional[Identity], policy: VisibilityPolicy = DEFAULT_POLICY
) -> List[Event]:
    """Apply filter_event to every event, dropping the ones left out."""
    visible = (filter_event(event, caller, policy) for event in events)
    return [event for event in visible if event is not None]
