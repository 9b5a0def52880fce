"""
Organizations service route handlers.
Manages the organizations users run events under.
"""

import logging
from typing import Any, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from eventboard.auth_service.utils import verify_token_from_request
from eventboard.common.records import find_by_id, find_record, new_id
from eventboard.common.validation import validate
from eventboard.database.json_store import StorageError, get_store

organizations_bp = Blueprint("organizations", __name__)

ORGANIZATIONS = "organizations"


@organizations_bp.before_request
def before_request() -> None:
    logging.info(f"[Organizations] Incoming {request.method} {request.path}")


@organizations_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Organizations] Response {response.status}")
    return response


@organizations_bp.route("", methods=["GET"])
def list_organizations() -> Tuple[Response, int]:
    """
    Get all organizations. Public access allowed.
    """
    try:
        organizations = get_store().read(ORGANIZATIONS)
    except StorageError as e:
        logging.error(f"Error listing organizations: {e}")
        return jsonify({"error": "Failed to list organizations"}), 500

    return jsonify(organizations), 200


@organizations_bp.route("/<organization_id>", methods=["GET"])
def get_organization(organization_id: str) -> Tuple[Response, int]:
    try:
        organizations = get_store().read(ORGANIZATIONS)
    except StorageError as e:
        logging.error(f"Error getting organization {organization_id}: {e}")
        return jsonify({"error": "Failed to retrieve organization"}), 500

    found = find_by_id(organizations, organization_id)
    if found is None:
        return jsonify({"error": "Organization not found"}), 404

    return jsonify(found.record), 200


@organizations_bp.route("", methods=["POST"])
def create_organization() -> Tuple[Response, int]:
    """
    Create an organization owned by the caller.

    With SINGLE_ORGANIZATION_PER_USER on, a caller who already owns one
    gets 403.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    result = validate("organization", request.get_json(silent=True))
    if not result.ok:
        return jsonify(result.errors), 400

    try:
        store = get_store()
        organizations = store.read(ORGANIZATIONS)

        if current_app.config.get("SINGLE_ORGANIZATION_PER_USER"):
            owned = find_record(organizations, lambda o: o.get("userId") == identity.id)
            if owned is not None:
                return jsonify({"error": "User already has an organization"}), 403

        record = validate(
            "organization_record", {**result.data, "id": new_id(), "userId": identity.id}
        )
        if not record.ok:
            return jsonify(record.errors), 400

        organizations.append(record.data)
        store.write(ORGANIZATIONS, organizations)
    except StorageError as e:
        logging.error(f"Error creating organization: {e}")
        return jsonify({"error": "Failed to create organization"}), 500

    return jsonify(record.data), 201


@organizations_bp.route("/<organization_id>", methods=["PATCH"])
def update_organization(organization_id: str) -> Tuple[Response, int]:
    """
    Owner-only: update name or description. userId cannot be changed.
    """
    identity, err, code = verify_token_from_request()
    if err:
        return err, code

    patch = validate("organization_patch", request.get_json(silent=True), partial=True)
    if not patch.ok:
        return jsonify(patch.errors), 400

    try:
        store = get_store()
        organizations = store.read(ORGANIZATIONS)

        found = find_by_id(organizations, organization_id)
        if found is None:
            return jsonify({"error": "Organization not found"}), 404
        if found.record.get("userId") != identity.id:
            return jsonify({"error": "Permission denied"}), 403

        merged = validate("organization_record", {**found.record, **patch.data})
        if not merged.ok:
            return jsonify(merged.errors), 400

        organizations[found.index] = merged.data
        store.write(ORGANIZATIONS, organizations)
    except StorageError as e:
        logging.error(f"Error updating organization {organization_id}: {e}")
        return jsonify({"error": "Failed to update organization"}), 500

    return jsonify(merged.data), 200


@organizations_bp.route("/<organization_id>", methods=["DELETE"])
def delete_organization(organization_id: str) -> Tuple[Any, int]:
    """
    Delete an organization.

    Any signed-in user may delete any organization: there is no ownership
    check here, and events bound to it keep their organizationId.
    """
    _, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        store = get_store()
        organizations = store.read(ORGANIZATIONS)

        found = find_by_id(organizations, organization_id)
        if found is None:
            return jsonify({"error": "Organization not found"}), 404

        del organizations[found.index]
        store.write(ORGANIZATIONS, organizations)
    except StorageError as e:
        logging.error(f"Error deleting organization {organization_id}: {e}")
        return jsonify({"error": "Failed to delete organization"}), 500

    return "", 204
