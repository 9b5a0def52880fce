"""
Events service routes: create, read, update, delete events, and
participation requests.
Handles event lifecycle management and the participant roster.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from eventboard.auth_service.utils import Identity, peek_identity, verify_token_from_request
from eventboard.common.records import Found, find_by_id, find_record, new_id
from eventboard.common.validation import validate
from eventboard.database.json_store import StorageError, get_store
from eventboard.events_service.visibility import VisibilityPolicy, filter_event, filter_events

events_bp = Blueprint("events", __name__)

EVENTS = "events"
ORGANIZATIONS = "organizations"
USERS = "users"


# --- REQUEST LOGGING ---
@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


def _policy() -> VisibilityPolicy:
    return VisibilityPolicy(
        omit_private_for_anonymous=bool(current_app.config.get("OMIT_PRIVATE_EVENTS_FOR_ANONYMOUS"))
    )


def _owned_organization(organizations: List[Dict[str, Any]], user_id: str) -> Optional[Found]:
    return find_record(organizations, lambda o: o.get("userId") == user_id)


def _with_roster(events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Stored records missing a roster have an empty one."""
    return [{**event, "participants": event.get("participants") or []} for event in events]


def _find_owned_event(events: List[Dict[str, Any]], event_id: str, identity: Identity) -> Optional[Found]:
    """Lookup scoped to the caller: someone else's event reads as missing."""
    return find_record(
        events, lambda e: e.get("id") == event_id and e.get("organizerId") == identity.id
    )


@events_bp.route("", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events as the caller may see them.

    Visibility Logic:
    - The organizer sees their own events in full.
    - Anonymous callers see private events and events that take
      registrations without organizationId and participants.
    - Signed-in callers see private events in full only once they are
      registered (and approved, where approval is required).

    Returns:
        200: List of event objects.
        500: Storage error.
    """
    caller = peek_identity()

    try:
        events = get_store().read(EVENTS)
        events = _with_roster(events)
    except StorageError as e:
        logging.error(f"Storage error listing events: {e}")
        return jsonify({"error": "Failed to retrieve events"}), 500

    return jsonify(filter_events(events, caller, _policy())), 200


@events_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id: str) -> Tuple[Response, int]:
    """
    Get a single event by ID, with the same field visibility as the listing.

    Returns:
        200: Event object.
        404: Event not found (or not visible to the caller at all).
    """
    caller = peek_identity()

    try:
        events = get_store().read(EVENTS)
        events = _with_roster(events)
    except StorageError as e:
        logging.error(f"Storage error getting event {event_id}: {e}")
        return jsonify({"error": "Failed to retrieve event"}), 500

    found = find_by_id(events, event_id)
    if found is None:
        return jsonify({"error": "Event not found"}), 404

    visible = filter_event(found.record, caller, _policy())
    if visible is None:
        return jsonify({"error": "Event not found"}), 404

    return jsonify(visible), 200


@events_bp.route("", methods=["POST"])
def create_event() -> Tuple[Response, int]:
    """
    Create an event under the caller's organization.

    organizerId and organizationId are taken from the caller, never from
    the body.

    Returns:
        201: The stored event.
        400: Field errors.
        401: Missing or invalid token.
        403: Caller has no organization.
        500: Storage error.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    result = validate("event", request.get_json(silent=True))
    if not result.ok:
        return jsonify(result.errors), 400

    try:
        store = get_store()
        owned = _owned_organization(store.read(ORGANIZATIONS), identity.id)
        if owned is None:
            return jsonify({"error": "Access Denied: User does not have an organization"}), 403

        record = validate("event_record", {
            **result.data,
            "id": new_id(),
            "organizerId": identity.id,
            "organizationId": owned.record["id"],
            "participants": [],
        })
        if not record.ok:
            return jsonify(record.errors), 400

        events = store.read(EVENTS)
        events.append(record.data)
        store.write(EVENTS, events)
    except StorageError as e:
        logging.error(f"Storage error creating event: {e}")
        return jsonify({"error": "Failed to create event"}), 500

    return jsonify(record.data), 201


@events_bp.route("/<event_id>", methods=["PATCH"])
def update_event(event_id: str) -> Tuple[Response, int]:
    """
    Update an event's descriptive fields.

    Permission:
    - Only the organizer. Anyone else gets 404, as the lookup is scoped to
      events the caller organizes.

    With REVALIDATE_EVENT_ORGANIZATION on, the organizer must still own the
    organization the event is bound to.

    Returns:
        200: The updated event.
        400: Field errors.
        401: Missing or invalid token.
        403: Organization binding no longer holds.
        404: Event not found.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    patch = validate("event_patch", request.get_json(silent=True), partial=True)
    if not patch.ok:
        return jsonify(patch.errors), 400

    try:
        store = get_store()
        events = store.read(EVENTS)

        found = _find_owned_event(events, event_id, identity)
        if found is None:
            return jsonify({"error": "Event not found"}), 404

        if current_app.config.get("REVALIDATE_EVENT_ORGANIZATION"):
            organizations = store.read(ORGANIZATIONS)
            bound = find_by_id(organizations, found.record.get("organizationId"))
            if bound is None or bound.record.get("userId") != identity.id:
                return jsonify({"error": "Access Denied: Event organization is no longer owned by organizer"}), 403

        changes = dict(patch.data)
        options = changes.get("registrationOptions")
        if isinstance(options, dict):
            changes["registrationOptions"] = {**(found.record.get("registrationOptions") or {}), **options}

        merged = validate("event_record", {**found.record, **changes})
        if not merged.ok:
            return jsonify(merged.errors), 400

        events[found.index] = merged.data
        store.write(EVENTS, events)
    except StorageError as e:
        logging.error(f"Storage error updating event {event_id}: {e}")
        return jsonify({"error": "Failed to update event"}), 500

    return jsonify(merged.data), 200


@events_bp.route("/<event_id>/participants", methods=["PATCH"])
def update_participants(event_id: str) -> Tuple[Response, int]:
    """
    Replace the participant roster. Organizer only.

    The body always carries the full list: {"participants": [...]}. This is
    how participants get approved or marked as paid.

    Returns:
        200: The updated event.
        400: Field errors.
        404: Event not found among the caller's events.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    roster = validate("event_participants", request.get_json(silent=True))
    if not roster.ok:
        return jsonify(roster.errors), 400

    try:
        store = get_store()
        events = store.read(EVENTS)

        found = _find_owned_event(events, event_id, identity)
        if found is None:
            return jsonify({"error": "Event not found"}), 404

        merged = validate("event_record", {**found.record, **roster.data})
        if not merged.ok:
            return jsonify(merged.errors), 400

        events[found.index] = merged.data
        store.write(EVENTS, events)
    except StorageError as e:
        logging.error(f"Storage error updating participants of {event_id}: {e}")
        return jsonify({"error": "Failed to update participants"}), 500

    return jsonify(merged.data), 200


@events_bp.route("/<event_id>", methods=["DELETE"])
def delete_event(event_id: str) -> Tuple[Any, int]:
    """
    Delete an event if the caller is its organizer.

    Returns:
        204: Deleted.
        401: Missing or invalid token.
        404: Event not found among the caller's events.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        store = get_store()
        events = store.read(EVENTS)

        found = _find_owned_event(events, event_id, identity)
        if found is None:
            return jsonify({"error": "Event not found"}), 404

        del events[found.index]
        store.write(EVENTS, events)
    except StorageError as e:
        logging.error(f"Storage error deleting event {event_id}: {e}")
        return jsonify({"error": "Failed to delete event"}), 500

    return "", 204


@events_bp.route("/<event_id>/request-participation", methods=["POST"])
def request_participation(event_id: str) -> Tuple[Response, int]:
    """
    Add the caller to an event's roster as a pending participant.

    Any signed-in user may ask to join any event, whatever its registration
    settings. Asking twice adds the caller twice.

    Returns:
        201: The updated event, as the caller may see it.
        401: Missing or invalid token.
        404: Event or caller's user record not found.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        store = get_store()
        events = store.read(EVENTS)

        found = find_by_id(events, event_id)
        if found is None:
            return jsonify({"error": "Event not found"}), 404

        user = find_by_id(store.read(USERS), identity.id)
        if user is None:
            return jsonify({"error": "User not found"}), 404

        participant = {
            "id": identity.id,
            "firstName": user.record.get("firstName"),
            "lastName": user.record.get("lastName"),
            "hasPaid": False,
            "isApproved": False,
            "registrationDate": datetime.now(timezone.utc).isoformat(),
        }
        participants = list(found.record.get("participants") or [])
        participants.append(participant)

        merged = validate("event_record", {**found.record, "participants": participants})
        if not merged.ok:
            return jsonify(merged.errors), 400

        events[found.index] = merged.data
        store.write(EVENTS, events)
    except StorageError as e:
        logging.error(f"Storage error requesting participation in {event_id}: {e}")
        return jsonify({"error": "Failed to request participation"}), 500

    # The caller is not the organizer, so the reply follows the listing rules.
    visible = filter_event(merged.data, identity, _policy())
    return jsonify(visible if visible is not None else {"id": event_id}), 201
