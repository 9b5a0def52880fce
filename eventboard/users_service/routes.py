"""
Users service route handlers.

Provides routes for:
- User registration
- User login (token in body, Authorization header and cookie)
- User listing, lookup by id and search by username
- Full replacement (PUT) and partial update (PATCH)
- Account deletion

Listing and lookup return stored records as they are, password hash
included. Mutations are limited to the caller's own account.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from flask import Blueprint, Response, jsonify, request

from eventboard.auth_service.utils import (
    TOKEN_COOKIE,
    TOKEN_EXPIRATION_MINUTES,
    Identity,
    create_token,
    verify_token_from_request,
)
from eventboard.common.records import find_by_id, find_record, new_id
from eventboard.common.validation import validate
from eventboard.database.json_store import StorageError, get_store

users_bp = Blueprint("users", __name__)
ph = PasswordHasher()

USERS = "users"


# --- REQUEST LOGGING ---
@users_bp.before_request
def before_request() -> None:
    """
    Log every incoming request method and path to the users service.
    """
    logging.info(f"[Users] Incoming {request.method} {request.path}")


@users_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Users] Response {response.status}")
    return response


def _username_taken(users: list, username: str, exclude_id: Optional[str] = None) -> bool:
    return find_record(
        users, lambda u: u.get("username") == username and u.get("id") != exclude_id
    ) is not None


def _username_error(username: str) -> list:
    return [{
        "path": ["username"],
        "message": f"Username '{username}' is already taken",
        "code": "unique",
    }]


def _require_self(user_id: str) -> Tuple[Optional[Identity], Optional[Response], Optional[int]]:
    """Verify the caller and make sure they are acting on their own account."""
    identity, err, code = verify_token_from_request()
    if err:
        return None, err, code
    if identity.id != user_id:
        return None, jsonify({"error": "Permission denied"}), 403
    return identity, None, None


def _hashed_record(user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Build the stored shape: hash the password and drop the confirmation."""
    return {
        "id": user_id,
        "username": data["username"],
        "firstName": data["firstName"],
        "lastName": data["lastName"],
        "password": ph.hash(data["password"]),
    }


# --- REGISTER ---
@users_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - username (str): Unique, at least 3 characters.
    - firstName, lastName (str): At least 3 characters.
    - password (str): At least 6 characters.
    - repeatPassword (str): Must equal password.

    Returns:
        201: The stored user record.
        400: List of field errors.
        500: Storage error.
    """
    result = validate("user", request.get_json(silent=True))
    if not result.ok:
        return jsonify(result.errors), 400

    try:
        store = get_store()
        users = store.read(USERS)

        if _username_taken(users, result.data["username"]):
            return jsonify(_username_error(result.data["username"])), 400

        new_user = _hashed_record(new_id(), result.data)
        users.append(new_user)
        store.write(USERS, users)
    except StorageError as e:
        logging.error(f"Storage error registering user: {e}")
        return jsonify({"error": "Registration failed"}), 500

    return jsonify(new_user), 201


# --- LOGIN ---
@users_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - username (str)
    - password (str)

    The token is returned in the body, in an Authorization header and in an
    httpOnly cookie. It is valid for TOKEN_EXPIRATION_MINUTES.

    Returns:
        200: {"token": str}
        400: Missing credentials.
        401: Invalid credentials (unknown user or wrong password).
        500: Storage error.
    """
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "Username and password required"}), 400

    if not isinstance(username, str) or not isinstance(password, str):
        return jsonify({"error": "Username and password must be strings"}), 400

    try:
        users = get_store().read(USERS)
    except StorageError as e:
        logging.error(f"Storage error during login: {e}")
        return jsonify({"error": "Login failed"}), 500

    found = find_record(users, lambda u: u.get("username") == username)
    if found is None:
        return jsonify({"error": "Invalid credentials"}), 401

    # Verify password against hash
    try:
        ph.verify(found.record["password"], password)
    except (VerificationError, InvalidHashError):
        return jsonify({"error": "Invalid credentials"}), 401

    token = create_token(found.record["id"], found.record["username"])

    response = jsonify({"token": token})
    response.headers["Authorization"] = f"Bearer {token}"
    response.set_cookie(
        TOKEN_COOKIE, token, httponly=True, max_age=TOKEN_EXPIRATION_MINUTES * 60
    )
    return response, 200


# --- LIST USERS ---
@users_bp.route("", methods=["GET"])
def list_users() -> Tuple[Response, int]:
    """
    List every stored user.

    Returns:
        200: List of user records.
        401: Missing or invalid token.
        500: Storage error.
    """
    _, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        users = get_store().read(USERS)
    except StorageError as e:
        logging.error(f"Storage error listing users: {e}")
        return jsonify({"error": "Failed to retrieve users"}), 500

    return jsonify(users), 200


# --- GET USER ---
@users_bp.route("/<user_id>", methods=["GET"])
def get_user(user_id: str) -> Tuple[Response, int]:
    """
    Get one user by id.

    Returns:
        200: User record.
        401: Missing or invalid token.
        404: User not found.
    """
    _, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        users = get_store().read(USERS)
    except StorageError as e:
        logging.error(f"Storage error getting user {user_id}: {e}")
        return jsonify({"error": "Could not retrieve user"}), 500

    found = find_by_id(users, user_id)
    if found is None:
        return jsonify({"error": "User not found"}), 404

    return jsonify(found.record), 200


# --- SEARCH BY USERNAME ---
@users_bp.route("/search/<username>", methods=["GET"])
def search_user(username: str) -> Tuple[Response, int]:
    """
    Find a user by exact username.

    Returns:
        200: User record.
        401: Missing or invalid token.
        404: No user with that username.
    """
    _, err, code = verify_token_from_request()
    if err:
        return err, code

    try:
        users = get_store().read(USERS)
    except StorageError as e:
        logging.error(f"Storage error searching user {username}: {e}")
        return jsonify({"error": "Could not retrieve user"}), 500

    found = find_record(users, lambda u: u.get("username") == username)
    if found is None:
        return jsonify({"error": "User not found"}), 404

    return jsonify(found.record), 200


# --- REPLACE USER ---
@users_bp.route("/<user_id>", methods=["PUT"])
def replace_user(user_id: str) -> Tuple[Response, int]:
    """
    Replace the caller's account with a complete new body.

    The body is validated like a registration; the id is kept.

    Returns:
        200: Updated user record.
        400: Field errors.
        401/403: Authentication failure or not the caller's account.
        404: User not found.
    """
    _, err, code = _require_self(user_id)
    if err:
        return err, code

    result = validate("user", request.get_json(silent=True))
    if not result.ok:
        return jsonify(result.errors), 400

    try:
        store = get_store()
        users = store.read(USERS)

        found = find_by_id(users, user_id)
        if found is None:
            return jsonify({"error": "User not found"}), 404

        if _username_taken(users, result.data["username"], exclude_id=user_id):
            return jsonify(_username_error(result.data["username"])), 400

        updated = _hashed_record(user_id, result.data)
        users[found.index] = updated
        store.write(USERS, users)
    except StorageError as e:
        logging.error(f"Storage error replacing user {user_id}: {e}")
        return jsonify({"error": "Update failed"}), 500

    return jsonify(updated), 200


# --- UPDATE USER ---
@users_bp.route("/<user_id>", methods=["PATCH"])
def update_user(user_id: str) -> Tuple[Response, int]:
    """
    Update specific fields of the caller's account.

    Allowed fields: username, firstName, lastName, password (with
    repeatPassword). A new password is hashed before it is stored.

    Returns:
        200: Updated user record.
        400: Field errors.
        401/403: Authentication failure or not the caller's account.
        404: User not found.
    """
    _, err, code = _require_self(user_id)
    if err:
        return err, code

    patch = validate("user_patch", request.get_json(silent=True), partial=True)
    if not patch.ok:
        return jsonify(patch.errors), 400

    fields = {k: v for k, v in patch.data.items() if k != "repeatPassword"}
    if fields.get("password") is not None:
        fields["password"] = ph.hash(fields["password"])

    try:
        store = get_store()
        users = store.read(USERS)

        found = find_by_id(users, user_id)
        if found is None:
            return jsonify({"error": "User not found"}), 404

        if "username" in fields and _username_taken(users, fields["username"], exclude_id=user_id):
            return jsonify(_username_error(fields["username"])), 400

        merged = validate("user_record", {**found.record, **fields, "id": user_id})
        if not merged.ok:
            return jsonify(merged.errors), 400

        users[found.index] = merged.data
        store.write(USERS, users)
    except StorageError as e:
        logging.error(f"Storage error updating user {user_id}: {e}")
        return jsonify({"error": "Update failed"}), 500

    return jsonify(merged.data), 200


# --- DELETE USER ---
@users_bp.route("/<user_id>", methods=["DELETE"])
def delete_user(user_id: str) -> Tuple[Any, int]:
    """
    Delete the caller's account permanently.

    Organizations and events the user owns are left in place.

    Returns:
        204: Deleted.
        401/403: Authentication failure or not the caller's account.
        404: User not found.
    """
    _, err, code = _require_self(user_id)
    if err:
        return err, code

    try:
        store = get_store()
        users = store.read(USERS)

        found = find_by_id(users, user_id)
        if found is None:
            return jsonify({"error": "User not found"}), 404

        del users[found.index]
        store.write(USERS, users)
    except StorageError as e:
        logging.error(f"Storage error deleting user {user_id}: {e}")
        return jsonify({"error": "Deletion failed"}), 500

    return "", 204
