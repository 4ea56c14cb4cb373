"""
auth.py - Registration and Login
=================================
Obtains the API token for the run's username.

Flow:
-----
1. POST /auth/registration {"username": ...}
2. If the API answers 400 the username already exists (ConflictError),
   so POST /auth/login {"username": ...} with the same username
3. Install the token on the HttpClient for all later calls

Any other failure is an AuthError and ends the run. There is no retry
besides the register -> login fallback, and the token is never refreshed.
"""

import logging
from typing import Any

import requests

from .errors import AuthError, ConflictError
from .http_client import HttpClient


logger = logging.getLogger(__name__)

REGISTRATION_PATH = "/auth/registration"
LOGIN_PATH = "/auth/login"

# Registration answers 400 when the username is taken
CONFLICT_STATUS = 400


def _extract_token(response: requests.Response) -> str | None:
    """Return the "token" field of a JSON response, or None if absent."""
    try:
        data: Any = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        return data.get("token")
    return None


def _error_text(response: requests.Response) -> str:
    return f"{response.status_code} {(response.text or '')[:200]}".strip()


def register(http: HttpClient, username: str) -> str | None:
    """
    Register the username and return the issued token.

    Raises:
        ConflictError: the username is already registered
        AuthError: any other HTTP or network failure
    """
    try:
        r = http.post(REGISTRATION_PATH, {"username": username})
    except requests.RequestException as e:
        raise AuthError(f"Error during registration: {e}") from e

    if r.status_code == CONFLICT_STATUS:
        raise ConflictError(f"Username {username!r} is already registered")
    if not 200 <= r.status_code < 300:
        raise AuthError(f"Error during registration: {_error_text(r)}")

    return _extract_token(r)


def login(http: HttpClient, username: str) -> str | None:
    """
    Log the username in and return its token.

    Raises:
        AuthError: on any HTTP or network failure
    """
    try:
        r = http.post(LOGIN_PATH, {"username": username})
    except requests.RequestException as e:
        raise AuthError(f"Error during login: {e}") from e

    if not 200 <= r.status_code < 300:
        raise AuthError(f"Error during login: {_error_text(r)}")

    return _extract_token(r)


def authenticate(http: HttpClient, username: str) -> str | None:
    """
    Register, or log in if the username exists, and set the token on `http`.

    Returns None when the API answered successfully but sent no token; the
    caller treats that as "no token obtained".
    """
    try:
        token = register(http, username)
        logger.info(f"Registered new user {username!r}")
    except ConflictError:
        logger.info(f"User {username!r} already exists, logging in...")
        token = login(http, username)

    if token:
        http.set_token(token)
    return token
