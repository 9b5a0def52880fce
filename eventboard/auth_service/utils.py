"""
Shared authentication helpers.
Provides token creation, verification, and the optional caller identity
used by listing endpoints.

Two ways to read a credential:
- verify_token / verify_token_from_request check the signature and expiry.
  Anything that can answer 401 or 403 goes through these.
- peek_token / peek_identity decode without checking the signature. Their
  result only shapes what a listing shows and never grants access.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from dotenv import load_dotenv
from flask import Response, jsonify, request

# Load .env only once here
load_dotenv()

# Load secrets & configs
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

JWT_ALGORITHM = "HS256"
TOKEN_EXPIRATION_MINUTES = int(os.getenv("TOKEN_EXPIRATION_MINUTES", 60))  # Default 1 hour
TOKEN_COOKIE = "token"


@dataclass(frozen=True)
class Identity:
    """The caller a credential speaks for."""

    id: str
    username: str


# --- JWT CREATION ---
def create_token(user_id: str, username: str) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (str): The unique ID of the user.
        username (str): The user's login name.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "id": user_id,
        "username": username,
        "exp": now + timedelta(minutes=TOKEN_EXPIRATION_MINUTES),
        "iat": now
    }

    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


# --- JWT VALIDATION ---
def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Validate a JWT's signature and expiry.

    Args:
        token (str): JWT string.

    Returns:
        dict: The claims if valid, None otherwise.
    """
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def peek_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode a JWT without checking signature or expiry.

    Returns:
        dict: The claims, or None if the token is not a decodable JWT.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    return claims if isinstance(claims, dict) else None


def _token_from_request() -> Optional[str]:
    """Bearer header first, then the login cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return request.cookies.get(TOKEN_COOKIE) or None


def _identity_from_claims(claims: Optional[Dict[str, Any]]) -> Optional[Identity]:
    if not claims:
        return None
    user_id = claims.get("id")
    username = claims.get("username")
    if not isinstance(user_id, str) or not user_id:
        return None
    return Identity(id=user_id, username=username if isinstance(username, str) else "")


def peek_identity() -> Optional[Identity]:
    """
    Best-effort caller identity for read paths.

    Returns:
        Identity: Who the credential claims to be, or None for an anonymous
        caller (no credential, malformed credential, missing claims).
    """
    token = _token_from_request()
    if not token:
        return None
    return _identity_from_claims(peek_token(token))


def verify_token_from_request() -> Tuple[Optional[Identity], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header (or the login cookie).

    Returns:
        tuple: (identity, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, identity is None.
    """
    token = _token_from_request()

    if not token:
        return None, jsonify({"error": "missing token"}), 401

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None, jsonify({"error": "token expired"}), 401
    except jwt.PyJWTError:
        return None, jsonify({"error": "invalid token"}), 401

    identity = _identity_from_claims(payload)
    if identity is None:
        return None, jsonify({"error": "invalid token"}), 401

    return identity, None, None
