"""
Conversion between auth keys and table values.

Reads never carry the secret itself: a configured key is rendered as the
``{hidden: true}`` placeholder. Writes accept a string or null and refuse the
placeholder, so a read-modify-write round trip cannot store it as a key.
"""

import json
from typing import Any, Optional, Tuple

from ..metadata import MAX_SECRET_LENGTH, AuthKey

HIDDEN_FIELD = "hidden"

HIDDEN_AUTH_KEY_ERROR = (
    "You're trying to set the `auth_key` field in the `auth` document of "
    "`rethinkdb.cluster_config` to {hidden: true}. The `auth_key` field can be set "
    "to a string, or `null` for no auth key. {hidden: true} is a special "
    "place-holder value that RethinkDB returns if you try to read the auth key; "
    "RethinkDB won't show you the real auth key for security reasons. Setting the "
    "auth key to {hidden: true} is not allowed."
)

INVALID_AUTH_KEY_ERROR = "The given auth key is invalid."


def make_hidden_auth_key() -> dict:
    """Return a fresh copy of the placeholder shown instead of a configured key."""
    return {HIDDEN_FIELD: True}


def is_hidden_auth_key(value: Any) -> bool:
    """
    Exact match against the placeholder.

    ``{"hidden": 1}`` compares equal to ``{"hidden": True}`` in Python, so
    the value has to be checked for ``True`` by identity.
    """
    return isinstance(value, dict) and len(value) == 1 and value.get(HIDDEN_FIELD) is True


def print_value(value: Any) -> str:
    """Canonical printable form of a table value."""
    try:
        return json.dumps(value, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)


def convert_auth_key_to_value(key: AuthKey) -> Optional[dict]:
    """Render an auth key for a read result: null when unset, the placeholder otherwise."""
    if not key.is_set:
        return None
    return make_hidden_auth_key()


def convert_auth_key_from_value(value: Any) -> Tuple[Optional[AuthKey], Optional[str]]:
    """
    Parse the ``auth_key`` field of a written row.

    Args:
        value: Field value from the row

    Returns:
        Tuple of (auth_key, None) on success or (None, error_message)
    """
    if value is None:
        return AuthKey(), None

    if isinstance(value, str):
        try:
            key = AuthKey.from_string(value)
        except UnicodeEncodeError:
            # Lone surrogates have no UTF-8 encoding
            return None, INVALID_AUTH_KEY_ERROR
        if key is None:
            size = len(value.encode("utf-8"))
            return None, (
                f"The auth key should be at most {MAX_SECRET_LENGTH} bytes long, "
                f"but your given key is {size} bytes."
            )
        return key, None

    if is_hidden_auth_key(value):
        return None, HIDDEN_AUTH_KEY_ERROR

    return None, f"Expected a string or null; got {print_value(value)}"
