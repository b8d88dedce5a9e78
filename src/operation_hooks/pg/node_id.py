"""Global identifiers: base64-encoded JSON arrays of ``[alias, *keys]``.

Example: ``["users", 1]`` encodes to ``WyJ1c2VycyIsMV0=``.
"""

import base64
import binascii
import json
from typing import Any

from operation_hooks.errors import InvalidIdentifierError


def encode_node_id(alias: str, *identifiers: Any) -> str:
    payload = json.dumps([alias, *identifiers], separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_node_id(node_id: str) -> tuple[str, list[Any]]:
    """Decode a global identifier into its alias and key values.

    Raises:
        InvalidIdentifierError: If the value is not a valid identifier
    """
    if not isinstance(node_id, str):
        raise InvalidIdentifierError("Invalid ID")
    try:
        decoded = json.loads(base64.b64decode(node_id, validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidIdentifierError(f"Invalid ID: {e}") from e
    if not isinstance(decoded, list) or not decoded or not isinstance(decoded[0], str):
        raise InvalidIdentifierError("Invalid ID")
    return decoded[0], decoded[1:]
